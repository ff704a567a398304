"""
依赖注入模块

提供基于反射的依赖注入引擎、实例注册表与标签解析器
"""

from .injector import CONFIGURATIONS, INIT_METHOD_NAME, SYSTEM_CONFIGURATION, Injector
from .policy import ConstructPolicy, NoCreatePolicy
from .registry import InstanceRegistry, ProviderInstanceRegistry
from .tags import BaseTag, DefaultTag, InjectTag, Tag, TagContainer, ValueTag, tag_keyword

__all__ = [
    'Injector',
    'INIT_METHOD_NAME',
    'SYSTEM_CONFIGURATION',
    'CONFIGURATIONS',
    'ConstructPolicy',
    'NoCreatePolicy',
    'InstanceRegistry',
    'ProviderInstanceRegistry',
    'Tag',
    'BaseTag',
    'InjectTag',
    'ValueTag',
    'DefaultTag',
    'TagContainer',
    'tag_keyword',
]
