"""
WireBoot 异常模块

提供框架及依赖注入引擎相关的异常类
"""

from typing import Any, Dict, Optional


class WireBootException(Exception):
    """WireBoot 框架异常基类"""

    def __init__(
        self,
        message: str = "WireBoot 框架错误",
        code: str = "WIREBOOT_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(WireBootException):
    """配置错误异常"""

    def __init__(
        self,
        message: str = "配置错误",
        config_key: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        code: str = "CONFIGURATION_ERROR"
    ):
        self.config_key = config_key
        super().__init__(message, code, details)


class SystemNotConfiguredError(ConfigurationError):
    """系统未配置：注册表缺失或缺少 systemConfiguration / configurations"""

    def __init__(
        self,
        message: str = "[inject] system is not configured",
        config_key: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, config_key, details, "SYSTEM_NOT_CONFIGURED")


class InjectionError(WireBootException):
    """依赖注入错误异常基类"""


class InvalidObjectError(InjectionError):
    """注入目标不是结构化对象"""

    def __init__(
        self,
        message: str = "[inject] invalid object",
        target: Any = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.target = target
        super().__init__(message, "INVALID_OBJECT", details)


class InvalidTagNameError(InjectionError):
    """标签解析器的类名无法推导出标签关键字"""

    def __init__(
        self,
        message: str = "[inject] invalid tag name, e.g. ExampleTag",
        tag: Any = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.tag = tag
        super().__init__(message, "INVALID_TAG_NAME", details)


class InvalidFuncError(InjectionError):
    """函数注入的目标不可调用"""

    def __init__(
        self,
        message: str = "[inject] invalid func",
        func: Any = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.func = func
        super().__init__(message, "INVALID_FUNC", details)


class CapabilityNotImplementedError(InjectionError):
    """声明的接口没有任何实现"""

    def __init__(
        self,
        message: str = "[inject] interface is not implemented",
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.field = field
        super().__init__(message, "NOT_IMPLEMENTED", details)


class ParameterNotInjectedError(InjectionError):
    """方法或函数参数无法解析，也无法自动创建"""

    def __init__(
        self,
        message: str = "[inject] parameter is not injected",
        parameter: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.parameter = parameter
        super().__init__(message, "PARAMETER_NOT_INJECTED", details)


class InstanceExistsError(WireBootException):
    """实例注册表中已存在同名实例"""

    def __init__(
        self,
        message: str = "实例已存在",
        instance_name: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.instance_name = instance_name
        super().__init__(message, "INSTANCE_EXISTS", details)
