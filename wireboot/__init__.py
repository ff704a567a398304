"""
WireBoot

基于反射的依赖注入框架：
- core/di/: 依赖注入引擎、实例注册表、标签解析器
- core/: 配置、日志、系统配置与应用上下文
- utils/: 反射、命名转换与变量替换工具
"""

from .core.application import Application, create_app
from .core.decorators import component
from .core.di import BaseTag, Injector, InjectTag, Tag, ValueTag
from .utils.reflector import tag

__version__ = "0.1.0"

__all__ = [
    "Application",
    "create_app",
    "component",
    "Injector",
    "Tag",
    "BaseTag",
    "InjectTag",
    "ValueTag",
    "tag",
]
