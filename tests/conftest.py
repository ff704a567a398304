"""
WireBoot - Test Configuration

Pytest fixtures shared by the injection engine and application tests.
"""
from typing import Any, Dict, List

import pytest
from loguru import logger

from wireboot.core import config as config_module
from wireboot.core import application as application_module
from wireboot.core.di import (
    CONFIGURATIONS,
    SYSTEM_CONFIGURATION,
    InjectTag,
    Injector,
    ProviderInstanceRegistry,
    TagContainer,
    ValueTag,
)
from wireboot.core.system import App, SystemConfiguration


@pytest.fixture
def system_config() -> SystemConfiguration:
    """System configuration with a known application name."""
    return SystemConfiguration(app=App(project="demo", name="demo-app"))


@pytest.fixture
def configurations() -> Dict[str, Any]:
    """Shared configuration map handed to tag resolvers."""
    return {"datasource": {"url": "sqlite://"}}


@pytest.fixture
def registry(system_config, configurations) -> ProviderInstanceRegistry:
    """Instance registry pre-populated with the system entries."""
    reg = ProviderInstanceRegistry()
    reg.store_if_absent(SYSTEM_CONFIGURATION, system_config)
    reg.store_if_absent(CONFIGURATIONS, configurations)
    return reg


@pytest.fixture
def injector(registry) -> Injector:
    """Injector with the built-in inject and value resolvers."""
    engine = Injector(registry, TagContainer())
    engine.register_tag(InjectTag(registry, engine.policy))
    engine.register_tag(ValueTag())
    return engine


@pytest.fixture
def log_messages() -> List[str]:
    """Capture loguru messages emitted during a test."""
    messages: List[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture(autouse=True)
def reset_globals(monkeypatch, tmp_path):
    """Isolate the global settings and current application between tests."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("CONFIG_FILE", raising=False)
    config_module.reload_config()
    application_module._current_app = None
    yield
    config_module.reload_config()
    application_module._current_app = None
