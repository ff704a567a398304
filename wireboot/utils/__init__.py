"""
工具函数模块

包含反射、命名转换与变量替换工具
"""

from .naming import lower_first, to_lower_camel, upper_first
from .reflector import (
    FieldDescriptor,
    Kind,
    StructTag,
    deep_fields,
    find_capability_field,
    indirect,
    indirect_type,
    kind_of,
    tag,
)
from .replacer import replace_map, replace_string_variables

__all__ = [
    "lower_first",
    "to_lower_camel",
    "upper_first",
    "FieldDescriptor",
    "Kind",
    "StructTag",
    "deep_fields",
    "find_capability_field",
    "indirect",
    "indirect_type",
    "kind_of",
    "tag",
    "replace_map",
    "replace_string_variables",
]
