"""
装饰器模块

提供约定优于配置的装饰器，用于标记可注入的组件
"""

import inspect
from typing import Any, Dict, Optional

from ..utils.naming import to_lower_camel

COMPONENT_ATTR = '__wireboot_component__'


def component(name: Optional[str] = None, **kwargs):
    """
    组件装饰器

    标记类或工厂函数为组件，注册到应用时使用指定名称，
    未指定时类使用类名的小驼峰形式，工厂函数使用返回类型名的小驼峰形式

    Args:
        name: 组件名称
        **kwargs: 其他组件参数

    Example:
        @component()
        class UserService:
            repository: Annotated[UserRepository, tag(inject="")]

        @component("mysqlRepository")
        def new_repository(config: DataSourceConfig) -> UserRepository:
            return UserRepository(config)
    """
    def decorator(obj):
        setattr(obj, COMPONENT_ATTR, {
            'name': name,
            'kwargs': kwargs
        })
        return obj
    return decorator


def get_component_config(obj: Any) -> Dict[str, Any]:
    """获取组件装饰器的配置，未装饰时返回空字典"""
    return getattr(obj, COMPONENT_ATTR, None) or {}


def component_name(obj: Any) -> str:
    """
    推导组件名称

    优先使用装饰器指定的名称；类使用类名；函数使用返回类型名，无返回类型注解时使用函数名
    """
    config = get_component_config(obj)
    if config.get('name'):
        return config['name']
    if isinstance(obj, type):
        return to_lower_camel(obj.__name__)
    if inspect.isfunction(obj) or inspect.ismethod(obj):
        return_type = getattr(obj, '__annotations__', {}).get('return')
        if isinstance(return_type, type):
            return to_lower_camel(return_type.__name__)
        return to_lower_camel(obj.__name__)
    return to_lower_camel(type(obj).__name__)
