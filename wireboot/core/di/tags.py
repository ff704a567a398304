"""
标签解析器

每个标签解析器认领一个标签关键字（由类名去掉 Tag 后缀并首字母小写得到），
负责将字段上的原始标签值转换为要注入的实例

Example:
    class FooTag(BaseTag):          # 认领关键字 foo
        def decode(self, obj, field, tag):
            return Foo(tag)

    class Bar:
        foo: Annotated[Foo, tag(foo="hello")]
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional

from loguru import logger as loguru_logger

from ...exceptions import CapabilityNotImplementedError, ConfigurationError, InvalidTagNameError
from ...utils.naming import to_lower_camel
from ...utils.reflector import (
    FieldDescriptor,
    Kind,
    get_type_name,
    indirect_type,
    kind_of,
    parse_object_name,
    strip_optional,
)
from ...utils.replacer import replace_string_variables
from .policy import ConstructPolicy
from .registry import InstanceRegistry

logger = loguru_logger.bind(name=__name__)

TAG_SUFFIX = 'Tag'

_TRUE_VALUES = ('true', '1', 'yes', 'on')


class Tag(ABC):
    """标签解析器接口"""

    @abstractmethod
    def init(self, system_config: Any, configurations: Dict[str, Any]) -> None:
        """解析前注入系统配置与共享配置"""

    @abstractmethod
    def decode(self, obj: Any, field: FieldDescriptor, tag: str) -> Optional[Any]:
        """
        解析标签

        Args:
            obj: 被注入的对象
            field: 字段描述符
            tag: 原始标签值

        Returns:
            要注入的实例，无法解析时返回 None
        """

    @abstractmethod
    def is_singleton(self) -> bool:
        """解析结果是否以字段名缓存到实例注册表"""


class BaseTag(Tag):
    """标签解析器基类"""

    def __init__(self):
        self.system_config: Any = None
        self.configurations: Dict[str, Any] = {}

    def init(self, system_config: Any, configurations: Dict[str, Any]) -> None:
        self.system_config = system_config
        self.configurations = configurations

    def decode(self, obj: Any, field: FieldDescriptor, tag: str) -> Optional[Any]:
        return None

    def is_singleton(self) -> bool:
        return False


def tag_keyword(tag: Tag) -> str:
    """
    获取标签解析器认领的关键字

    Raises:
        InvalidTagNameError: 类名无法推导出关键字（如类名就是 Tag）
    """
    keyword = parse_object_name(tag, TAG_SUFFIX)
    if not keyword:
        raise InvalidTagNameError(tag=tag, details={'class': type(tag).__name__})
    return keyword


class TagContainer:
    """
    标签解析器容器

    按注册顺序保存，注册顺序即解析优先级，只追加不删除
    """

    def __init__(self, tags: Optional[List[Tag]] = None):
        self._tags: List[Tag] = list(tags or [])

    def register(self, tag: Tag) -> None:
        """注册标签解析器"""
        self._tags.append(tag)
        logger.debug(f"已注册标签解析器: {type(tag).__name__}")

    def keywords(self) -> List[str]:
        """获取全部关键字"""
        return [tag_keyword(t) for t in self._tags]

    def __iter__(self) -> Iterator[Tag]:
        return iter(list(self._tags))

    def __len__(self) -> int:
        return len(self._tags)


def convert_value(value: Any, target_type: Any, field_name: str = '') -> Any:
    """
    将标签解析出的字符串（或列表）转换为字段类型

    Raises:
        ConfigurationError: 无法转换
    """
    declared = strip_optional(target_type)
    element = indirect_type(declared)

    def _convert(item: Any, tp: Any) -> Any:
        if not isinstance(item, str):
            return item
        if tp is bool:
            return item.strip().lower() in _TRUE_VALUES
        if tp in (int, float):
            return tp(item.strip())
        return item

    try:
        if kind_of(declared) is Kind.SLICE:
            items = value if isinstance(value, list) else [v.strip() for v in value.split(',') if v.strip()]
            return [_convert(item, element) for item in items]
        if isinstance(value, list):
            return value
        return _convert(value, declared)
    except ValueError as e:
        raise ConfigurationError(
            f"无法将 '{value}' 转换为 {get_type_name(declared)}",
            config_key=field_name
        ) from e


class InjectTag(BaseTag):
    """
    inject 标签：按名称从实例注册表注入

    标签值为空时使用字段类型名的小驼峰形式；找不到实例时自动创建结构化类型，
    接口类型找不到实现时报错

    Example:
        class UserController:
            user_service: Annotated[UserService, tag(inject="")]
            repo: Annotated[Repository, tag(inject="mysqlRepository")]
    """

    def __init__(self, registry: InstanceRegistry, policy: Optional[ConstructPolicy] = None):
        super().__init__()
        self.registry = registry
        self.policy = policy or ConstructPolicy()

    def decode(self, obj: Any, field: FieldDescriptor, tag: str) -> Optional[Any]:
        name = tag or to_lower_camel(get_type_name(field.type))
        instance = self.registry.lookup(name)
        if instance is not None:
            return instance

        if kind_of(indirect_type(field.type)) is Kind.INTERFACE:
            raise CapabilityNotImplementedError(
                f"[inject] interface {get_type_name(field.type)} is not implemented",
                field=field.name
            )
        if not self.policy.can_create(field.type):
            return None
        return self.policy.create(field.type)

    def is_singleton(self) -> bool:
        return True


class ValueTag(BaseTag):
    """
    value 标签：注入配置值

    支持 ${app.name} 形式引用系统配置，以及 ${ENV_NAME:default} 形式引用环境变量

    Example:
        class Greeter:
            app_name: Annotated[str, tag(value="${app.name}")]
            timeout: Annotated[int, tag(value="${GREETER_TIMEOUT:30}")]
    """

    def decode(self, obj: Any, field: FieldDescriptor, tag: str) -> Optional[Any]:
        value = replace_string_variables(tag, self.system_config)
        if value == '' or value == []:
            return None
        return convert_value(value, field.type, field.name)


def _is_zero(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, bytes, int, float, list, tuple, dict, set)):
        return not value
    return False


class DefaultTag(ValueTag):
    """default 标签：字段未赋值时设置默认值"""

    def decode(self, obj: Any, field: FieldDescriptor, tag: str) -> Optional[Any]:
        if not _is_zero(getattr(obj, field.name, None)):
            return None
        return super().decode(obj, field, tag)
