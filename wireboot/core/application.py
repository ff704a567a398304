"""
WireBoot 应用上下文

负责一次性创建进程级的实例注册表与依赖注入引擎，写入系统配置，
注册内置标签解析器，并按注册顺序构建组件
"""

import inspect
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

from ..exceptions import InstanceExistsError, InvalidObjectError
from ..utils.reflector import is_struct_value
from .config import get_settings
from .decorators import component_name
from .di import (
    CONFIGURATIONS,
    SYSTEM_CONFIGURATION,
    InjectTag,
    Injector,
    ProviderInstanceRegistry,
    Tag,
    TagContainer,
    ValueTag,
)
from .logger import setup_logging
from .system import SystemConfiguration, build_system_config

# 当前应用实例
_current_app: Optional['Application'] = None


def app() -> 'Application':
    """获取当前应用实例"""
    if _current_app is None:
        raise RuntimeError("应用实例未初始化，请确保应用已创建")
    return _current_app


class Application:
    """WireBoot 应用上下文"""

    def __init__(
            self,
            name: Optional[str] = None,
            config_file: Optional[str] = None,
            properties: Optional[Dict[str, Any]] = None,
            configure_logging: bool = True
    ):
        """
        初始化应用上下文

        Args:
            name: 应用名称，默认读取 app.name
            config_file: 配置文件路径或 URL
            properties: 覆盖配置项，键支持点号路径，如 {"app.name": "demo"}
            configure_logging: 是否根据配置初始化 loguru
        """
        self.config = get_settings(config_file)
        for key, value in (properties or {}).items():
            self.config.set(key, value)

        if configure_logging:
            setup_logging(config_file)

        self.system_config: SystemConfiguration = build_system_config(self.config)
        self.name = name or self.system_config.app.name
        self.logger = logger.bind(name=self.name)

        self.properties: Dict[str, Any] = {}
        self.configurations: Dict[str, Any] = {}
        self.registry = ProviderInstanceRegistry()
        self.injector = Injector(self.registry, TagContainer())

        self.registry.store_if_absent(SYSTEM_CONFIGURATION, self.system_config)
        self.registry.store_if_absent(CONFIGURATIONS, self.configurations)

        # 内置标签解析器，注册顺序即优先级
        self.injector.register_tag(InjectTag(self.registry, self.injector.policy))
        self.injector.register_tag(ValueTag())

        self._components: List[Tuple[str, Any]] = []

        global _current_app
        _current_app = self

    def set_property(self, name: str, value: Any) -> 'Application':
        """设置应用属性"""
        self.properties[name] = value
        return self

    def get_property(self, name: str, default: Any = None) -> Any:
        """获取应用属性"""
        return self.properties.get(name, default)

    def register_tag(self, tag: Tag) -> None:
        """注册自定义标签解析器"""
        self.injector.register_tag(tag)

    def add_configuration(self, name: str, configuration: Any) -> None:
        """添加共享配置，标签解析器在 init 时获得全部共享配置"""
        self.configurations[name] = configuration
        self.logger.debug(f"已添加配置: {name}")

    def component(self, *params: Any) -> 'Application':
        """
        注册组件

        支持 component(obj) 与 component("name", obj) 两种形式，
        obj 可以是对象实例、类或工厂函数

        Raises:
            InvalidObjectError: 参数为空或组件无效
        """
        if not params or params[0] is None:
            raise InvalidObjectError("[app] invalid component", target=None)

        if len(params) == 2 and isinstance(params[0], str):
            name, obj = params
        else:
            obj = params[0]
            name = component_name(obj)

        if obj is None or isinstance(obj, (str, int, float, bool)):
            raise InvalidObjectError("[app] invalid component", target=obj)

        self._components.append((name, obj))
        self.logger.debug(f"已注册组件: {name}")
        return self

    def build_components(self) -> Dict[str, Any]:
        """
        按注册顺序构建组件

        工厂函数和类通过函数注入创建实例，实例对象直接注入，结果以组件名存入实例注册表

        Returns:
            组件名称到实例的字典
        """
        built: Dict[str, Any] = {}
        for name, obj in self._components:
            if inspect.isclass(obj) or inspect.isfunction(obj) or inspect.ismethod(obj):
                instance = self.injector.into_func(obj)
                if instance is None:
                    self.logger.warning(f"组件 {name} 的工厂函数没有返回实例")
                    continue
            else:
                instance = obj

            if is_struct_value(instance):
                self.injector.into_object(instance)
            try:
                self.registry.store_if_absent(name, instance)
            except InstanceExistsError:
                self.logger.warning(f"instance {name} is already exist")
            built[name] = instance
            self.logger.info(f"已构建组件: {name} ({type(instance).__name__})")

        self._components.clear()
        return built

    def inject(self, obj: Any) -> Any:
        """注入对象并返回该对象"""
        self.injector.into_object(obj)
        return obj

    def get_instance(self, name: str) -> Any:
        """按名称获取实例"""
        return self.registry.lookup(name)


def create_app(
        name: Optional[str] = None,
        config_file: Optional[str] = None,
        **kwargs
) -> Application:
    """创建 WireBoot 应用实例"""
    return Application(name, config_file, **kwargs)


def get_instance(name: str) -> Any:
    """从当前应用获取实例"""
    return app().get_instance(name)
