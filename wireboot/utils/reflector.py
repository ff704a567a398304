"""
反射工具

依赖注入引擎的类型检查器：展开基类层次得到字段列表、剥离 Optional/序列包装、
判断类型种类（结构体、接口、序列 ...）以及提取对象实现的接口字段
"""

import collections.abc
import dataclasses
import enum
import inspect
import re
import sys
import types
import typing
import weakref
from abc import ABC
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple

from loguru import logger as loguru_logger

from .naming import lower_first

logger = loguru_logger.bind(name=__name__)


class Kind(enum.Enum):
    """类型种类"""

    INVALID = 'invalid'
    INTERFACE = 'interface'
    PTR = 'ptr'
    SLICE = 'slice'
    MAP = 'map'
    FUNC = 'func'
    SCALAR = 'scalar'
    STRUCT = 'struct'


_SEQUENCE_ORIGINS = (
    list, tuple, set, frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
    collections.abc.Iterable,
    collections.abc.Collection,
)

_MAP_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)

_UNION_TYPES = (typing.Union,) + ((types.UnionType,) if hasattr(types, 'UnionType') else ())

# 展开字段时忽略的基类
_IGNORED_BASES = {object, ABC, typing.Generic}


def _is_ignored_base(base: type) -> bool:
    if base in _IGNORED_BASES or base is typing.Protocol:
        return True
    # pydantic BaseModel 本身不参与展开
    return base.__module__.startswith('pydantic.') and base.__name__ == 'BaseModel'


_TAG_PAIR = re.compile(r'([A-Za-z_][A-Za-z0-9_\-]*):"((?:[^"\\]|\\.)*)"')


class StructTag(Mapping[str, str]):
    """
    字段标签

    保存字段声明的元数据，键为标签关键字，值为原始标签值

    Example:
        class Foo:
            bar: Annotated[Bar, tag(inject="")]
            name: Annotated[str, tag(value="${app.name}")]
    """

    def __init__(self, values: Optional[Mapping[str, Any]] = None, **kwargs):
        merged: Dict[str, str] = {}
        for key, value in {**(values or {}), **kwargs}.items():
            merged[str(key)] = '' if value is None else str(value)
        self._values = merged

    @classmethod
    def parse(cls, raw: str) -> 'StructTag':
        """
        解析 key:"value" 形式的原始标签字符串

        Example:
            StructTag.parse('inject:"" value:"${app.name}"')
        """
        return cls({key: value.replace('\\"', '"') for key, value in _TAG_PAIR.findall(raw or '')})

    def lookup(self, key: str) -> Tuple[str, bool]:
        """查找标签值，返回 (值, 是否存在)"""
        if key in self._values:
            return self._values[key], True
        return '', False

    def merge(self, other: Mapping[str, Any]) -> 'StructTag':
        return StructTag({**self._values, **dict(other)})

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __hash__(self) -> int:
        return hash(tuple(sorted(self._values.items())))

    def __repr__(self) -> str:
        return ' '.join(f'{k}:"{v}"' for k, v in self._values.items())


EMPTY_TAG = StructTag()


def tag(raw: Optional[str] = None, **kwargs) -> StructTag:
    """
    创建字段标签，用于 Annotated 类型注解

    Args:
        raw: 可选的原始标签字符串，如 'inject:""'
        **kwargs: 标签关键字及其值
    """
    base = StructTag.parse(raw) if raw else EMPTY_TAG
    return base.merge(kwargs)


@dataclass(frozen=True)
class FieldDescriptor:
    """字段描述符"""

    name: str = ''
    type: Any = None
    tag: StructTag = field(default=EMPTY_TAG)
    anonymous: bool = False
    owner: Optional[type] = None

    @property
    def is_zero(self) -> bool:
        return not self.name and self.type is None


def _strip_annotated(tp: Any) -> Tuple[Any, Tuple[Any, ...]]:
    if typing.get_origin(tp) is typing.Annotated:
        return tp.__origin__, tuple(tp.__metadata__)
    return tp, ()


def _non_none_args(tp: Any) -> List[Any]:
    return [arg for arg in typing.get_args(tp) if arg is not type(None)]


def indirect_type(tp: Any) -> Any:
    """
    剥离指针（Optional）与序列包装，得到元素类型

    Examples:
        Optional[Foo] -> Foo
        List[Optional[Foo]] -> Foo
        Annotated[Foo, ...] -> Foo
    """
    while True:
        tp, _ = _strip_annotated(tp)
        origin = typing.get_origin(tp)
        if origin in _UNION_TYPES:
            args = _non_none_args(tp)
            if len(args) != 1:
                return tp
            tp = args[0]
        elif origin in _SEQUENCE_ORIGINS:
            args = [a for a in typing.get_args(tp) if a is not Ellipsis]
            if not args:
                return origin
            tp = args[0]
        else:
            return tp


def strip_optional(tp: Any) -> Any:
    """只剥离 Annotated 与 Optional，保留序列包装"""
    while True:
        tp, _ = _strip_annotated(tp)
        if typing.get_origin(tp) in _UNION_TYPES:
            args = _non_none_args(tp)
            if len(args) != 1:
                return tp
            tp = args[0]
        else:
            return tp


def indirect(value: Any) -> Any:
    """解引用 weakref.ref 链，不创建新对象"""
    while isinstance(value, weakref.ReferenceType):
        value = value()
    return value


def is_interface_type(tp: Any) -> bool:
    """是否为接口类型（Protocol、抽象类、直接继承 ABC 的类、Any/object）"""
    if tp is Any or tp is object:
        return True
    if not isinstance(tp, type):
        return False
    if getattr(tp, '_is_protocol', False):
        return True
    if inspect.isabstract(tp):
        return True
    return ABC in tp.__bases__


def kind_of(tp: Any) -> Kind:
    """获取类型种类"""
    if tp is None or tp is inspect.Parameter.empty:
        return Kind.INVALID
    tp, _ = _strip_annotated(tp)
    if tp is Any:
        return Kind.INTERFACE
    origin = typing.get_origin(tp)
    if origin in _UNION_TYPES:
        return Kind.PTR if type(None) in typing.get_args(tp) else Kind.INTERFACE
    if origin in _SEQUENCE_ORIGINS:
        return Kind.SLICE
    if origin in _MAP_ORIGINS:
        return Kind.MAP
    if origin is collections.abc.Callable:
        return Kind.FUNC
    if origin is not None:
        tp = origin
    if not isinstance(tp, type):
        return Kind.INVALID
    if is_interface_type(tp):
        return Kind.INTERFACE
    if issubclass(tp, (str, bytes, bytearray)) or issubclass(tp, enum.Enum):
        return Kind.SCALAR
    if issubclass(tp, (list, tuple, set, frozenset)):
        return Kind.SLICE
    if issubclass(tp, dict):
        return Kind.MAP
    if tp.__module__ == 'builtins':
        if issubclass(tp, (int, float, complex)):
            return Kind.SCALAR
        if tp in (types.FunctionType, types.BuiltinFunctionType, types.MethodType):
            return Kind.FUNC
        return Kind.INVALID
    return Kind.STRUCT


def is_struct_type(tp: Any) -> bool:
    """是否为结构化（组合）类型"""
    return isinstance(tp, type) and kind_of(tp) is Kind.STRUCT


def is_struct_value(value: Any) -> bool:
    """是否为结构化对象实例"""
    if value is None or isinstance(value, type):
        return False
    if isinstance(value, (types.ModuleType, types.FunctionType, types.MethodType)):
        return False
    return is_struct_type(type(value))


def get_type_name(tp: Any) -> str:
    """获取类型名称，非类型返回空字符串"""
    tp = indirect_type(tp)
    if tp is Any:
        return 'Any'
    if isinstance(tp, type):
        return tp.__name__
    if isinstance(tp, str):
        return tp
    if isinstance(tp, typing.ForwardRef):
        return tp.__forward_arg__
    return getattr(tp, '__name__', '')


def _own_annotations(cls: type) -> Dict[str, Any]:
    """获取类自身声明的字段注解（解析字符串注解）"""
    own = inspect.get_annotations(cls) if hasattr(inspect, 'get_annotations') \
        else cls.__dict__.get('__annotations__', {})
    if not own:
        return {}
    module = sys.modules.get(cls.__module__)
    globalns = getattr(module, '__dict__', {})
    try:
        hints = typing.get_type_hints(cls, globalns=globalns, include_extras=True)
    except (NameError, TypeError) as e:
        # 前向引用无法解析时使用原始注解
        logger.debug(f"无法解析 {cls.__qualname__} 的类型注解: {e}")
        hints = {}
    return {name: hints.get(name, annotation) for name, annotation in own.items()}


def _dataclass_metadata(cls: type, name: str) -> Mapping[str, Any]:
    if dataclasses.is_dataclass(cls):
        for f in dataclasses.fields(cls):
            if f.name == name:
                return {k: v for k, v in f.metadata.items() if isinstance(k, str)}
    return {}


def _is_class_var(tp: Any) -> bool:
    tp, _ = _strip_annotated(tp)
    return tp is typing.ClassVar or typing.get_origin(tp) is typing.ClassVar \
        or (isinstance(tp, str) and tp.startswith(('ClassVar', 'typing.ClassVar')))


def deep_fields(reflect_type: Any) -> List[FieldDescriptor]:
    """
    展开结构化类型的全部字段

    基类按声明顺序深度优先展开：结构化基类的字段被拼接进来，接口基类作为匿名字段追加；
    随后追加类自身声明的字段

    Args:
        reflect_type: 类型（可带 Optional/序列包装）

    Returns:
        有序字段描述符列表，非结构化类型返回空列表
    """
    fields: List[FieldDescriptor] = []
    reflect_type = indirect_type(reflect_type)
    if not is_struct_type(reflect_type):
        return fields

    for base in reflect_type.__bases__:
        if _is_ignored_base(base):
            continue
        if is_interface_type(base):
            fields.append(FieldDescriptor(name=base.__name__, type=base, anonymous=True, owner=reflect_type))
        else:
            fields.extend(deep_fields(base))

    for name, annotation in _own_annotations(reflect_type).items():
        if _is_class_var(annotation):
            continue
        declared, metadata = _strip_annotated(annotation)
        struct_tag = EMPTY_TAG
        for meta in metadata:
            if isinstance(meta, StructTag):
                struct_tag = struct_tag.merge(meta)
        struct_tag = struct_tag.merge(_dataclass_metadata(reflect_type, name))
        fields.append(FieldDescriptor(name=name, type=declared, tag=struct_tag, owner=reflect_type))

    return fields


def is_settable(obj: Any, f: FieldDescriptor) -> bool:
    """字段是否可写：公开、非匿名且对象未冻结"""
    if f.anonymous or not f.name or f.name.startswith('_'):
        return False
    params = getattr(type(obj), '__dataclass_params__', None)
    if params is not None and params.frozen:
        return False
    model_config = getattr(type(obj), 'model_config', None)
    if isinstance(model_config, dict) and model_config.get('frozen'):
        return False
    return True


def get_embedded_interface_field(reflect_type: Any) -> FieldDescriptor:
    """从类型的第一个基类开始查找匿名接口字段"""
    reflect_type = indirect_type(reflect_type)
    if is_struct_type(reflect_type):
        for base in reflect_type.__bases__:
            if _is_ignored_base(base):
                continue
            if is_interface_type(base):
                return FieldDescriptor(name=base.__name__, type=base, anonymous=True, owner=reflect_type)
            return get_embedded_interface_field(base)
    return FieldDescriptor()


def find_capability_field(obj: Any) -> FieldDescriptor:
    """
    获取对象实现的接口字段（用于按角色对组件分类）

    Args:
        obj: 对象实例或类

    Returns:
        匿名接口字段描述符，不存在时返回零值描述符
    """
    if obj is None:
        return FieldDescriptor()
    obj = indirect(obj)
    return get_embedded_interface_field(obj if isinstance(obj, type) else type(obj))


def parse_object_name(obj: Any, eliminator: str) -> str:
    """
    根据对象类型名推导名称：去掉后缀并首字母小写

    Examples:
        InjectTag, 'Tag' -> inject
        Tag, 'Tag' -> ''
    """
    typ = obj if isinstance(obj, type) else type(indirect(obj))
    name = typ.__name__
    if eliminator and name.endswith(eliminator):
        name = name[:-len(eliminator)]
    return lower_first(name)


def parse_object_pkg_name(obj: Any) -> str:
    """获取对象类型所在模块的最后一级名称"""
    typ = obj if isinstance(obj, type) else indirect_type(obj)
    if not isinstance(typ, type):
        typ = type(indirect(typ))
    module = getattr(typ, '__module__', '') or ''
    return module.rsplit('.', 1)[-1]



def call_method_by_name(obj: Any, name: str, *args) -> Any:
    """按名称调用对象方法"""
    method = getattr(obj, name, None)
    if method is None or not callable(method):
        raise AttributeError(f"{type(obj).__name__} 没有方法 '{name}'")
    return method(*args)


def call_func(func: Callable, *args) -> Any:
    """调用函数"""
    if not callable(func):
        raise TypeError(f"{func!r} 不可调用")
    return func(*args)
