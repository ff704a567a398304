"""
核心基础设施模块

包含配置、日志、系统配置、依赖注入与应用上下文
"""

from .config import (
    get_settings,
    get_config,
    get_config_str,
    get_config_int,
    get_config_bool,
    reload_config
)
from .logger import get_logger, logger, setup_logging
from .system import SystemConfiguration, build_system_config

__all__ = [
    "get_settings",
    "get_config",
    "get_config_str",
    "get_config_int",
    "get_config_bool",
    "reload_config",
    "get_logger",
    "logger",  # loguru logger，建议直接使用
    "setup_logging",
    "SystemConfiguration",
    "build_system_config",
]
