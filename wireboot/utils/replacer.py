"""
变量替换工具

替换字符串中的 ${name} / ${name:default} 引用，引用按点号路径从根对象中取值，
取不到时回退到同名环境变量
"""

import os
import re
from typing import Any, Dict, List, Optional, Union

from loguru import logger as loguru_logger

logger = loguru_logger.bind(name=__name__)

_VARIABLE_PATTERN = re.compile(r'\$\{(.*?)\}')

EMPTY = ''


def parse_variables(source: str, pattern: re.Pattern = _VARIABLE_PATTERN) -> List[List[str]]:
    """
    解析字符串中的变量引用

    Returns:
        [[完整引用, 变量名], ...]，如 [['${app.name}', 'app.name']]
    """
    return [[m.group(0), m.group(1)] for m in pattern.finditer(source or '')]


def _child(parent: Any, name: str) -> Any:
    if isinstance(parent, dict):
        if name in parent:
            return parent[name]
        # 兼容小写键
        return parent.get(name.lower())
    return getattr(parent, name, None)


def parse_references(root: Any, var_names: List[str]) -> Any:
    """
    按路径解析根对象中的引用值

    Args:
        root: 根对象（对象属性或字典键均可）
        var_names: 路径，如 ['app', 'name']

    Returns:
        标量转为字符串，列表原样返回，其他情况返回空字符串
    """
    value = root
    for name in var_names:
        if value is None:
            return EMPTY
        value = _child(value, name)

    if value is None:
        return EMPTY
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (list, tuple)):
        return list(value)
    return EMPTY


def replace_string_variables(source: str, root: Any = None) -> Union[str, List[Any]]:
    """
    替换字符串中的引用和环境变量

    引用值为列表时直接返回该列表

    Examples:
        '${app.name}'           -> 'wireboot-app'
        '${APP_PROFILES_ACTIVE:dev}' -> 环境变量值，未设置时为 'dev'
    """
    for full_name, var_name in parse_variables(source):
        default_value: Optional[str] = None
        n = var_name.find(':')
        if n > 0:
            default_value = var_name[n + 1:]
            var_name = var_name[:n]

        ref_value = parse_references(root, var_name.split('.')) if root is not None else EMPTY
        if isinstance(ref_value, list):
            return ref_value

        new_value = ref_value or os.getenv(var_name, EMPTY)
        if not new_value and default_value is not None:
            new_value = default_value
        if new_value or default_value is not None:
            source = source.replace(full_name, new_value)
        else:
            logger.debug(f"无法解析变量引用: {full_name}")
    return source


def replace_map(mapping: Dict[str, Any], root: Any) -> Dict[str, Any]:
    """递归替换字典中的字符串值"""
    for key, value in mapping.items():
        if isinstance(value, str):
            mapping[key] = replace_string_variables(value, root)
        elif isinstance(value, dict):
            replace_map(value, root)
        elif isinstance(value, list):
            mapping[key] = [
                replace_string_variables(item, root) if isinstance(item, str) else item
                for item in value
            ]
    return mapping
