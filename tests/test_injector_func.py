"""
Tests for function injection.
"""
from abc import ABC, abstractmethod
from functools import partial
from typing import List

import pytest

from wireboot.core.di import Injector, ProviderInstanceRegistry
from wireboot.exceptions import InvalidFuncError, ParameterNotInjectedError, SystemNotConfiguredError
from wireboot.utils.naming import to_lower_camel
from wireboot.utils.reflector import parse_object_pkg_name


class Service:
    name: str = ""


class Repository(ABC):
    @abstractmethod
    def find(self) -> str: ...


class Cache:
    size: int = 0


class CachedService:
    def __init__(self, cache: Cache):
        self.cache = cache


def make_service(s: Service) -> Service:
    return s


class TestIntoFunc:
    """Tests for calling factories with resolved arguments."""

    def test_parameter_is_auto_created(self, registry, injector):
        result = injector.into_func(make_service)

        assert isinstance(result, Service)
        assert result.name == ""
        assert registry.lookup("service") is result

    def test_registered_parameter_is_reused(self, registry, injector):
        cache = Cache()
        registry.store_if_absent("cache", cache)

        def make(c: Cache) -> Cache:
            return c

        assert injector.into_func(make) is cache

    def test_module_qualified_name(self, registry, injector):
        cache = Cache()
        registry.store_if_absent(to_lower_camel(parse_object_pkg_name(Cache) + "Cache"), cache)

        def make(c: Cache) -> Cache:
            return c

        assert injector.into_func(make) is cache

    def test_class_is_constructed(self, registry, injector):
        instance = injector.into_func(CachedService)
        assert isinstance(instance, CachedService)
        assert registry.lookup("cache") is instance.cache

    def test_no_result(self, injector):
        calls = []

        def register(service: Service):
            calls.append(service)

        assert injector.into_func(register) is None
        assert len(calls) == 1

    def test_default_for_uncreatable_parameter(self, injector):
        def collect(names: List[str] = None):
            return names

        assert injector.into_func(collect) is None

    def test_partial(self, registry, injector):
        def label(prefix: str, s: Service) -> str:
            return f"{prefix}:{type(s).__name__}"

        assert injector.into_func(partial(label, "svc")) == "svc:Service"

    def test_not_callable(self, injector):
        with pytest.raises(InvalidFuncError):
            injector.into_func(42)

    def test_interface_parameter(self, injector):
        def make(repository: Repository):
            return repository

        with pytest.raises(ParameterNotInjectedError, match="Repository is not injected"):
            injector.into_func(make)


class HTTPClient:
    timeout: int = 0


def use_client(client: HTTPClient) -> HTTPClient:
    return client


class TestAutoCreatedInstances:
    """Tests for reuse of auto-created parameters."""

    def test_acronym_type_is_created_once(self, registry, injector, log_messages):
        first = injector.into_func(use_client)
        second = injector.into_func(use_client)

        assert first is second
        assert registry.lookup("httpClient") is first
        assert not any("already exist" in m for m in log_messages)


class TestUnconfiguredRegistry:
    """Tests for function injection without system entries."""

    def test_no_parameters(self):
        engine = Injector(ProviderInstanceRegistry())
        assert engine.into_func(lambda: 42) == 42

    def test_non_struct_parameters(self):
        engine = Injector(ProviderInstanceRegistry())

        def collect(names: List[str] = None):
            return names

        assert engine.into_func(collect) is None

    def test_struct_parameter_needs_configuration(self):
        with pytest.raises(SystemNotConfiguredError):
            Injector(ProviderInstanceRegistry()).into_func(make_service)
