"""
Tests for the tag resolver protocol and built-in resolvers.
"""
from abc import ABC, abstractmethod
from typing import Annotated, List, Optional

import pytest

from wireboot.core.di import (
    BaseTag,
    DefaultTag,
    InjectTag,
    ProviderInstanceRegistry,
    Tag,
    TagContainer,
    ValueTag,
    tag_keyword,
)
from wireboot.core.di.tags import convert_value
from wireboot.core.system import App, SystemConfiguration
from wireboot.exceptions import (
    CapabilityNotImplementedError,
    ConfigurationError,
    InvalidTagNameError,
)
from wireboot.utils.reflector import FieldDescriptor, tag


class Repository(ABC):
    @abstractmethod
    def find(self) -> str: ...


class Cache:
    size: int = 0


class EnvironmentTag(BaseTag):
    pass


class TestTagKeyword:
    """Tests for keyword derivation from resolver class names."""

    def test_builtin_keywords(self):
        reg = ProviderInstanceRegistry()
        assert tag_keyword(InjectTag(reg)) == "inject"
        assert tag_keyword(ValueTag()) == "value"
        assert tag_keyword(DefaultTag()) == "default"
        assert tag_keyword(EnvironmentTag()) == "environment"

    def test_empty_keyword_is_rejected(self):
        class Tag(BaseTag):
            pass

        with pytest.raises(InvalidTagNameError):
            tag_keyword(Tag())


class TestTagContainer:
    """Tests for the ordered resolver collection."""

    def test_registration_order(self):
        container = TagContainer()
        first, second = ValueTag(), EnvironmentTag()
        container.register(first)
        container.register(second)
        assert list(container) == [first, second]
        assert container.keywords() == ["value", "environment"]
        assert len(container) == 2

    def test_iteration_is_a_snapshot(self):
        container = TagContainer([ValueTag()])
        iterator = iter(container)
        container.register(EnvironmentTag())
        assert len(list(iterator)) == 1

    def test_tag_is_abstract(self):
        with pytest.raises(TypeError):
            Tag()


class TestInjectTag:
    """Tests for registry-backed injection."""

    def test_explicit_name(self):
        reg = ProviderInstanceRegistry()
        cache = Cache()
        reg.store_if_absent("primaryCache", cache)
        field = FieldDescriptor(name="cache", type=Cache)
        assert InjectTag(reg).decode(object(), field, "primaryCache") is cache

    def test_empty_name_uses_type_name(self):
        reg = ProviderInstanceRegistry()
        cache = Cache()
        reg.store_if_absent("cache", cache)
        field = FieldDescriptor(name="store", type=Optional[Cache])
        assert InjectTag(reg).decode(object(), field, "") is cache

    def test_missing_struct_is_created(self):
        field = FieldDescriptor(name="store", type=Cache)
        created = InjectTag(ProviderInstanceRegistry()).decode(object(), field, "")
        assert isinstance(created, Cache)

    def test_missing_interface_fails(self):
        field = FieldDescriptor(name="repository", type=Repository)
        with pytest.raises(CapabilityNotImplementedError) as exc_info:
            InjectTag(ProviderInstanceRegistry()).decode(object(), field, "")
        assert exc_info.value.field == "repository"

    def test_sequence_is_not_created(self):
        field = FieldDescriptor(name="caches", type=List[Cache])
        assert InjectTag(ProviderInstanceRegistry()).decode(object(), field, "") is None

    def test_is_singleton(self):
        assert InjectTag(ProviderInstanceRegistry()).is_singleton()


class TestValueTag:
    """Tests for configuration value injection."""

    @pytest.fixture
    def value_tag(self) -> ValueTag:
        resolver = ValueTag()
        resolver.init(SystemConfiguration(app=App(name="demo-app")), {})
        return resolver

    def test_reference(self, value_tag):
        field = FieldDescriptor(name="app_name", type=str)
        assert value_tag.decode(object(), field, "${app.name}") == "demo-app"

    def test_default_converted_to_field_type(self, value_tag, monkeypatch):
        monkeypatch.delenv("WIREBOOT_TIMEOUT", raising=False)
        field = FieldDescriptor(name="timeout", type=int)
        assert value_tag.decode(object(), field, "${WIREBOOT_TIMEOUT:30}") == 30

    def test_bool_and_list_conversion(self, value_tag):
        assert value_tag.decode(object(), FieldDescriptor(name="debug", type=bool), "true") is True
        hosts = FieldDescriptor(name="hosts", type=List[str])
        assert value_tag.decode(object(), hosts, "a, b") == ["a", "b"]

    def test_empty_result_is_absent(self, value_tag, monkeypatch):
        monkeypatch.delenv("WIREBOOT_EMPTY", raising=False)
        field = FieldDescriptor(name="empty", type=str)
        assert value_tag.decode(object(), field, "${WIREBOOT_EMPTY:}") is None

    def test_is_transient(self, value_tag):
        assert not value_tag.is_singleton()

    def test_conversion_error(self):
        with pytest.raises(ConfigurationError) as exc_info:
            convert_value("abc", int, "timeout")
        assert exc_info.value.config_key == "timeout"


class TestDefaultTag:
    """Tests for zero-value defaults."""

    class Settings:
        name: Annotated[str, tag(default="guest")] = ""

    def test_zero_field_gets_default(self):
        resolver = DefaultTag()
        resolver.init(SystemConfiguration(), {})
        field = FieldDescriptor(name="name", type=str)
        assert resolver.decode(self.Settings(), field, "guest") == "guest"

    def test_assigned_field_is_kept(self):
        resolver = DefaultTag()
        resolver.init(SystemConfiguration(), {})
        settings = self.Settings()
        settings.name = "admin"
        field = FieldDescriptor(name="name", type=str)
        assert resolver.decode(settings, field, "guest") is None
