"""
自动创建策略

方法/函数参数在注册表中找不到时，决定能否以零参数调用的方式创建默认实例
"""

from typing import Any

from ...exceptions import ParameterNotInjectedError
from ...utils.reflector import Kind, get_type_name, indirect_type, kind_of, strip_optional


class ConstructPolicy:
    """
    默认创建策略

    接口与序列类型无法自动创建，其他类型通过零参数调用创建
    """

    NOT_CREATABLE = frozenset({Kind.INVALID, Kind.INTERFACE, Kind.SLICE})

    def can_create(self, declared_type: Any) -> bool:
        """
        是否可以自动创建

        Args:
            declared_type: 参数或字段声明的类型（可带 Optional/序列包装）
        """
        if kind_of(strip_optional(declared_type)) in self.NOT_CREATABLE:
            return False
        return kind_of(indirect_type(declared_type)) not in self.NOT_CREATABLE

    def create(self, declared_type: Any) -> Any:
        """
        创建默认实例

        Raises:
            ParameterNotInjectedError: 类型无法以零参数调用的方式实例化
        """
        target = indirect_type(declared_type)
        try:
            return target()
        except TypeError as e:
            raise ParameterNotInjectedError(
                f"{get_type_name(target)} is not injected: {e}",
                parameter=get_type_name(target)
            ) from e


class NoCreatePolicy(ConstructPolicy):
    """禁止自动创建，所有依赖必须预先注册"""

    def can_create(self, declared_type: Any) -> bool:
        return False
