"""
依赖注入引擎

基于反射的依赖注入：
- 字段注入：按字段名（小驼峰）从实例注册表查找，找不到时交给标签解析器
- 方法注入：字段注入完成后调用 init 钩子，参数按类型名解析，必要时自动创建
- 函数注入：解析函数的全部参数后调用函数并返回结果

Example:
    @dataclass
    class Foo:
        bar: Annotated[Optional[Bar], tag(inject="")] = None

        def init(self, service: UserService):
            self.service = service

    injector = Injector(registry)
    injector.register_tag(InjectTag(registry))
    injector.into_object(foo)
"""

import functools
import inspect
import typing
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from loguru import logger as loguru_logger

from ...exceptions import (
    InstanceExistsError,
    InvalidFuncError,
    InvalidObjectError,
    ParameterNotInjectedError,
    SystemNotConfiguredError,
)
from ...utils.naming import to_lower_camel
from ...utils.reflector import (
    FieldDescriptor,
    call_func,
    call_method_by_name,
    deep_fields,
    get_type_name,
    indirect,
    indirect_type,
    is_settable,
    is_struct_value,
    parse_object_pkg_name,
)
from .policy import ConstructPolicy
from .registry import InstanceRegistry
from .tags import DefaultTag, Tag, TagContainer, tag_keyword

logger = loguru_logger.bind(name=__name__)

INIT_METHOD_NAME = 'init'
SYSTEM_CONFIGURATION = 'systemConfiguration'
CONFIGURATIONS = 'configurations'


def _resolve_annotation(annotation: str, globalns: Dict[str, Any]) -> Any:
    """按函数所在模块解析字符串注解，无法解析时保留原字符串"""
    try:
        return eval(annotation, globalns)
    except (NameError, AttributeError, SyntaxError, TypeError) as e:
        logger.debug(f"无法解析类型注解 '{annotation}': {e}")
        return annotation


class _Scope:
    """单次顶层注入调用共享的配置"""

    __slots__ = ('system_config', 'configurations', 'tags')

    def __init__(self, system_config: Any, configurations: Dict[str, Any], tags: Sequence[Tag]):
        self.system_config = system_config
        self.configurations = configurations
        self.tags = tags


class Injector:
    """依赖注入引擎"""

    def __init__(
        self,
        registry: Optional[InstanceRegistry],
        tags: Optional[TagContainer] = None,
        policy: Optional[ConstructPolicy] = None
    ):
        """
        初始化依赖注入引擎

        Args:
            registry: 实例注册表，需预先包含 systemConfiguration 与 configurations
            tags: 标签解析器容器
            policy: 参数自动创建策略
        """
        self.registry = registry
        self.tags = tags if tags is not None else TagContainer()
        self.policy = policy or ConstructPolicy()

    def register_tag(self, tag: Tag) -> None:
        """注册标签解析器，注册顺序即优先级"""
        self.tags.register(tag)

    # ==================== 注册表访问 ====================

    def _get_instance_by_name(self, name: str) -> Optional[Any]:
        return self.registry.lookup(to_lower_camel(name))

    def _save_instance(self, name: str, instance: Any) -> None:
        try:
            self.registry.store_if_absent(name, instance)
        except InstanceExistsError:
            logger.warning(f"instance {name} is already exist")

    def _open_scope(self, tags: Sequence[Tag]) -> _Scope:
        if self.registry is None:
            raise SystemNotConfiguredError()
        system_config = self.registry.lookup(SYSTEM_CONFIGURATION)
        if system_config is None:
            raise SystemNotConfiguredError(config_key=SYSTEM_CONFIGURATION)
        configurations = self.registry.lookup(CONFIGURATIONS)
        if configurations is None:
            raise SystemNotConfiguredError(config_key=CONFIGURATIONS)
        return _Scope(system_config, configurations, list(tags) if tags else list(self.tags))

    # ==================== 对外接口 ====================

    def into_object(self, obj: Any, *tags: Tag) -> None:
        """
        注入对象：先注入字段，再调用 init 钩子

        Args:
            obj: 被注入的对象
            *tags: 指定的标签解析器，为空时使用已注册的全部解析器

        Raises:
            SystemNotConfiguredError: 注册表未配置
            InvalidObjectError: 对象不是结构化对象
        """
        self._into_object(obj, self._open_scope(tags))

    def inject_fields(self, obj: Any, *tags: Tag) -> None:
        """只注入字段，不调用 init 钩子（嵌套对象仍完整注入）"""
        self._inject_fields(obj, self._open_scope(tags))

    def inject_method(self, obj: Any, method_name: str = INIT_METHOD_NAME, *tags: Tag) -> None:
        """
        解析方法参数并调用方法，方法不存在时什么也不做

        Raises:
            ParameterNotInjectedError: 参数无法解析
        """
        if not self._has_method(obj, method_name):
            return
        self._inject_method(obj, method_name, self._open_scope(tags))

    def default_value(self, obj: Any) -> None:
        """为带 default 标签且未赋值的字段设置默认值"""
        self._inject_fields(obj, self._open_scope([DefaultTag()]))

    def into_func(self, func: Callable) -> Any:
        """
        注入函数参数并调用函数

        Args:
            func: 函数、方法或类

        Returns:
            函数的返回值

        Raises:
            InvalidFuncError: 对象不可调用
            ParameterNotInjectedError: 参数无法解析
        """
        if not callable(func):
            raise InvalidFuncError(func=func)
        if self.registry is None:
            raise SystemNotConfiguredError()

        # 只有结构化参数需要注入时才读取系统配置
        scope: Optional[_Scope] = None
        inputs: List[Any] = []
        for param, param_type in self._signature(func):
            value, ok = self._parse_method_input(param_type, param)
            if not ok:
                name = get_type_name(param_type) or param.name
                raise ParameterNotInjectedError(f"{name} is not injected", parameter=name)
            if is_struct_value(indirect(value)):
                if scope is None:
                    scope = self._open_scope(())
                self._into_object(value, scope)
            inputs.append(value)

        return call_func(func, *inputs)

    # ==================== 注入实现 ====================

    def _into_object(self, obj: Any, scope: _Scope) -> None:
        self._inject_fields(obj, scope)
        self._inject_method(obj, INIT_METHOD_NAME, scope)

    def _inject_fields(self, obj: Any, scope: _Scope) -> None:
        target = indirect(obj)
        if not is_struct_value(target):
            logger.error(f"[inject] object: {obj!r}, type: {type(target).__name__}")
            raise InvalidObjectError(target=obj)

        for field in deep_fields(type(target)):
            if field.anonymous:
                continue

            field_name = to_lower_camel(field.name)
            injected = self._get_instance_by_name(field.name)
            if injected is None:
                injected = self._decode_tags(target, field, field_name, scope)

            settable = is_settable(target, field)
            if injected is not None and settable:
                setattr(target, field.name, injected)
                logger.debug(f"Injected {type(injected).__name__} into {type(target).__name__}.{field.name}")

            if not settable:
                continue
            field_obj = indirect(getattr(target, field.name, None))
            if is_struct_value(field_obj) and type(field_obj) is not type(target):
                self._into_object(field_obj, scope)

    def _decode_tags(self, obj: Any, field: FieldDescriptor, field_name: str, scope: _Scope) -> Optional[Any]:
        for tag_impl in scope.tags:
            keyword = tag_keyword(tag_impl)
            tag_value, ok = field.tag.lookup(keyword)
            if not ok:
                continue
            tag_impl.init(scope.system_config, scope.configurations)
            injected = tag_impl.decode(obj, field, tag_value)
            if injected is not None:
                if tag_impl.is_singleton():
                    self._save_instance(field_name, injected)
                # 每个字段只使用一个标签注入
                return injected
        return None

    @staticmethod
    def _has_method(obj: Any, method_name: str) -> bool:
        return callable(getattr(type(indirect(obj)), method_name, None))

    def _inject_method(self, obj: Any, method_name: str, scope: _Scope) -> None:
        if not self._has_method(obj, method_name):
            return

        target = indirect(obj)
        method = getattr(target, method_name)
        inputs: List[Any] = []
        for param, param_type in self._signature(method):
            value, ok = self._parse_method_input(param_type, param)
            if not ok:
                name = get_type_name(param_type) or param.name
                raise ParameterNotInjectedError(
                    f"{name} is not injected into {type(target).__name__}.{method_name}",
                    parameter=name
                )
            param_obj = indirect(value)
            if is_struct_value(param_obj) and type(param_obj) is not type(target):
                self._into_object(value, scope)
            inputs.append(value)

        call_method_by_name(target, method_name, *inputs)

    @staticmethod
    def _signature(func: Callable) -> List[Tuple[inspect.Parameter, Any]]:
        """获取可注入参数及其类型（忽略 *args/**kwargs）"""
        signature = inspect.signature(func)
        target = func
        while isinstance(target, functools.partial):
            target = target.func
        if isinstance(target, type):
            target = target.__init__
        globalns = getattr(inspect.unwrap(target), '__globals__', {})
        try:
            hints = typing.get_type_hints(target, include_extras=True)
        except (NameError, TypeError):
            hints = {}

        params = []
        for param in signature.parameters.values():
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue
            annotation = hints.get(param.name, param.annotation)
            if isinstance(annotation, str):
                annotation = _resolve_annotation(annotation, globalns)
            params.append((param, None if annotation is inspect.Parameter.empty else annotation))
        return params

    def _parse_method_input(self, param_type: Any, param: Optional[inspect.Parameter] = None) -> Tuple[Any, bool]:
        """
        解析参数：类型名 -> 模块名 + 类型名 -> 自动创建

        Returns:
            (参数值, 是否解析成功)
        """
        in_type = indirect_type(param_type)
        type_name = get_type_name(in_type)

        instance = self._get_instance_by_name(type_name) if type_name else None
        if instance is None and type_name:
            alternative_name = parse_object_pkg_name(in_type) + type_name
            instance = self._get_instance_by_name(alternative_name)
        if instance is not None:
            return instance, True

        if not self.policy.can_create(param_type):
            default = param.default if param is not None else inspect.Parameter.empty
            if default is not inspect.Parameter.empty:
                return default, True
            return None, False

        instance = self.policy.create(param_type)
        # 与查找使用相同的命名规则
        self._save_instance(to_lower_camel(type_name), instance)
        return instance, True
