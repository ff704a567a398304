"""
系统配置

将 Dynaconf 配置中的 app / server / logging 绑定为系统配置对象，
依赖注入引擎以 systemConfiguration 为名从实例注册表读取它
"""

from typing import Any, Dict, List

from dynaconf import Dynaconf
from pydantic import BaseModel, ConfigDict, Field

from ..utils.replacer import replace_map


class Profiles(BaseModel):
    """环境配置"""

    model_config = ConfigDict(frozen=True)

    include: List[str] = Field(default_factory=list)
    active: str = "dev"


class App(BaseModel):
    """应用配置"""

    model_config = ConfigDict(frozen=True)

    project: str = "wireboot"
    name: str = "wireboot-app"
    profiles: Profiles = Field(default_factory=Profiles)


class Server(BaseModel):
    """服务器配置"""

    model_config = ConfigDict(frozen=True)

    port: str = "8080"


class Logging(BaseModel):
    """日志配置"""

    model_config = ConfigDict(frozen=True)

    level: str = "info"


class SystemConfiguration(BaseModel):
    """系统配置"""

    model_config = ConfigDict(frozen=True)

    app: App = Field(default_factory=App)
    server: Server = Field(default_factory=Server)
    logging: Logging = Field(default_factory=Logging)


def _section(settings: Dynaconf, key: str) -> Dict[str, Any]:
    value = settings.get(key, {}) or {}
    if hasattr(value, 'to_dict'):
        value = value.to_dict()
    return {str(k).lower(): v for k, v in dict(value).items()}


def build_system_config(settings: Dynaconf) -> SystemConfiguration:
    """
    构建系统配置

    配置值中的 ${ENV_NAME:default} 引用会被替换为环境变量或默认值

    Args:
        settings: Dynaconf 设置实例

    Returns:
        系统配置对象
    """
    data = {
        "app": _section(settings, "app"),
        "server": _section(settings, "server"),
        "logging": _section(settings, "logging"),
    }
    if isinstance(data["app"].get("profiles"), dict):
        data["app"]["profiles"] = {str(k).lower(): v for k, v in data["app"]["profiles"].items()}
    if "port" in data["server"]:
        data["server"]["port"] = str(data["server"]["port"])

    replace_map(data, data)
    return SystemConfiguration.model_validate(data)
