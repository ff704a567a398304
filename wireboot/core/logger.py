"""
日志管理模块

基于 loguru 的日志管理，提供初始化配置功能
所有代码可以直接使用: from loguru import logger
"""

import logging
import os
import sys
from typing import Any, Dict, Optional

from loguru import logger as loguru_logger

from .config import get_settings

logger = loguru_logger

DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)

# 标准 logging 格式到 loguru 格式的映射
_FORMAT_MAPPING = {
    "%(asctime)s": "{time:YYYY-MM-DD HH:mm:ss}",
    "%(name)s": "{name}",
    "%(levelname)s": "{level: <8}",
    "%(message)s": "{message}",
    "%(filename)s": "{file.name}",
    "%(funcName)s": "{function}",
    "%(lineno)d": "{line}",
}


def _convert_format(user_format: str) -> str:
    for std_format, loguru_format in _FORMAT_MAPPING.items():
        user_format = user_format.replace(std_format, loguru_format)
    return user_format


def setup_logging(config_file: Optional[str] = None) -> None:
    """
    根据配置文件初始化 loguru 日志系统

    Args:
        config_file: 配置文件路径，如果为 None 则使用默认配置
    """
    config = get_settings(config_file)

    # 移除默认的 handler
    loguru_logger.remove()

    log_level = str(config.get("logging.level", "INFO")).upper()

    use_json = config.get("logging.json", False)
    if isinstance(use_json, str):
        use_json = use_json.lower() in ("true", "1", "yes", "on")

    common_kwargs: Dict[str, Any] = {
        "level": log_level,
        "backtrace": True,
        "diagnose": True,
    }
    if use_json:
        # JSON 格式不需要 format 参数
        console_kwargs = {"sink": sys.stdout, "serialize": True, **common_kwargs}
        file_kwargs = {"serialize": True, **common_kwargs}
    else:
        user_format = config.get("logging.format", None)
        log_format = _convert_format(user_format) if user_format else DEFAULT_FORMAT
        console_kwargs = {"sink": sys.stdout, "format": log_format, "colorize": True, **common_kwargs}
        file_kwargs = {"format": log_format, **common_kwargs}

    loguru_logger.add(**console_kwargs)

    log_file = config.get("logging.file")
    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        loguru_logger.add(
            log_file,
            rotation="10 MB",
            retention="7 days",
            compression="zip",
            **file_kwargs
        )

    # 配置第三方库的日志级别（仅设置标准 logging 的级别，不拦截转发）
    third_party_config = config.get("logging.third_party", {}) or {}
    if isinstance(third_party_config, dict):
        for logger_name, level_name in third_party_config.items():
            if isinstance(level_name, str):
                level = getattr(logging, level_name.upper(), logging.INFO)
                logging.getLogger(logger_name).setLevel(level)


def get_logger(name: str = "wireboot"):
    """
    获取绑定名称的日志器

    Args:
        name: 日志器名称（通过 bind 绑定到日志记录的 extra 中）

    Returns:
        loguru Logger 实例
    """
    return loguru_logger.bind(name=name)
