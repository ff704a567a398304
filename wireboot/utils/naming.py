"""
命名转换工具

实例注册表的键统一使用小驼峰命名（lowerCamelCase）
"""

import re

_WORD_SEPARATOR = re.compile(r'[_\-\s.]+')
_LEADING_UPPER = re.compile(r'^([A-Z]+)(?=[A-Z][a-z]|$|[0-9_])')


def lower_first(name: str) -> str:
    """
    首字母小写

    Examples:
        UserService -> userService
        Service -> service
    """
    if not name:
        return name
    return name[0].lower() + name[1:]


def upper_first(name: str) -> str:
    """首字母大写"""
    if not name:
        return name
    return name[0].upper() + name[1:]


def to_lower_camel(name: str) -> str:
    """
    转换为小驼峰命名

    Args:
        name: 字段名、类名或下划线分隔的名称

    Returns:
        小驼峰形式的名称

    Examples:
        user_service -> userService
        UserService -> userService
        HTTPClient -> httpClient
        bar -> bar
    """
    parts = [p for p in _WORD_SEPARATOR.split(name or '') if p]
    if not parts:
        return ''

    # 开头的连续大写（如 HTTPClient 中的 HTTP）整体转小写
    head = parts[0]
    match = _LEADING_UPPER.match(head)
    if match and len(match.group(1)) > 1:
        head = match.group(1).lower() + head[len(match.group(1)):]
    else:
        head = lower_first(head)

    return head + ''.join(upper_first(p) for p in parts[1:])

