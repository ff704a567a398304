"""
实例注册表

依赖注入引擎只通过两个操作使用注册表：按名称查找实例、按名称存储实例（已存在时失败）。
默认实现中每个实例以 dependency_injector 的 Object 提供者保存，便于在测试中覆盖
"""

import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from dependency_injector import providers
from loguru import logger as loguru_logger

from ...exceptions import InstanceExistsError

logger = loguru_logger.bind(name=__name__)


class InstanceRegistry(ABC):
    """实例注册表接口"""

    @abstractmethod
    def lookup(self, name: str) -> Optional[Any]:
        """
        按名称查找实例

        Args:
            name: 实例名称（小驼峰）

        Returns:
            实例，不存在时返回 None
        """

    @abstractmethod
    def store_if_absent(self, name: str, instance: Any) -> None:
        """
        按名称存储实例，先写入者生效

        Raises:
            InstanceExistsError: 同名实例已存在
        """


class ProviderInstanceRegistry(InstanceRegistry):
    """基于 dependency_injector 提供者的实例注册表"""

    def __init__(self):
        """初始化实例注册表"""
        self._providers: Dict[str, providers.Object] = {}
        self._lock = threading.RLock()

    def lookup(self, name: str) -> Optional[Any]:
        with self._lock:
            provider = self._providers.get(name)
        if provider is None:
            return None
        return provider()

    def store_if_absent(self, name: str, instance: Any) -> None:
        with self._lock:
            if name in self._providers:
                raise InstanceExistsError(
                    f"实例 '{name}' 已存在",
                    instance_name=name
                )
            self._providers[name] = providers.Object(instance)
        logger.debug(f"已注册实例: {name} ({type(instance).__name__})")

    def override(self, name: str, instance: Any):
        """
        覆盖已注册的实例

        返回值可作为上下文管理器使用，退出时恢复原实例

        Example:
            with registry.override("userService", fake_service):
                injector.into_object(controller)

        Raises:
            KeyError: 实例未注册
        """
        with self._lock:
            if name not in self._providers:
                raise KeyError(f"实例 '{name}' 未注册")
            provider = self._providers[name]
        return provider.override(providers.Object(instance))

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._providers

    def __len__(self) -> int:
        with self._lock:
            return len(self._providers)
