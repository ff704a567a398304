"""
Tests for the type inspector.
"""
import weakref
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Annotated, Any, ClassVar, Dict, List, Optional, Protocol

from wireboot.utils.reflector import (
    FieldDescriptor,
    Kind,
    StructTag,
    deep_fields,
    find_capability_field,
    get_type_name,
    indirect,
    indirect_type,
    is_settable,
    kind_of,
    parse_object_name,
    parse_object_pkg_name,
    tag,
)


class Handler(ABC):
    @abstractmethod
    def handle(self) -> str: ...


class Greeter(Protocol):
    def greet(self) -> str: ...


class Base:
    base_name: str = ""


class Child(Base):
    nickname: Annotated[str, tag(value="${app.name}")] = ""
    count: int = 0
    registry_size: ClassVar[int] = 3


class Service(Handler):
    label: str = ""

    def handle(self) -> str:
        return self.label


class SpecialService(Service):
    pass


@dataclass
class Record:
    name: str = field(default="", metadata={"default": "anonymous"})
    owner: Annotated[Optional[Base], tag(inject="")] = None


@dataclass(frozen=True)
class FrozenRecord:
    name: str = ""


class TestStructTag:
    """Tests for field tags."""

    def test_parse_raw_tag(self):
        parsed = StructTag.parse('inject:"" value:"${app.name}"')
        assert parsed.lookup("inject") == ("", True)
        assert parsed.lookup("value") == ("${app.name}", True)
        assert parsed.lookup("default") == ("", False)

    def test_tag_helper_merges_raw_and_keywords(self):
        t = tag('inject:"userService"', value="x")
        assert dict(t) == {"inject": "userService", "value": "x"}

    def test_repr(self):
        assert repr(tag(inject="")) == 'inject:""'


class TestKinds:
    """Tests for kind classification and wrapper stripping."""

    def test_indirect_type(self):
        assert indirect_type(Optional[Base]) is Base
        assert indirect_type(List[Optional[Base]]) is Base
        assert indirect_type(Annotated[Base, tag(inject="")]) is Base

    def test_kind_of(self):
        assert kind_of(Base) is Kind.STRUCT
        assert kind_of(Handler) is Kind.INTERFACE
        assert kind_of(Greeter) is Kind.INTERFACE
        assert kind_of(Any) is Kind.INTERFACE
        assert kind_of(Optional[Base]) is Kind.PTR
        assert kind_of(List[Base]) is Kind.SLICE
        assert kind_of(Dict[str, Base]) is Kind.MAP
        assert kind_of(int) is Kind.SCALAR
        assert kind_of(str) is Kind.SCALAR
        assert kind_of(None) is Kind.INVALID

    def test_indirect_follows_weakref_without_allocating(self):
        target = Base()
        ref = weakref.ref(target)
        assert indirect(ref) is target
        assert indirect(target) is target

    def test_get_type_name(self):
        assert get_type_name(Optional[Base]) == "Base"
        assert get_type_name(List[Service]) == "Service"


class TestDeepFields:
    """Tests for field flattening."""

    def test_base_fields_are_spliced_first(self):
        names = [f.name for f in deep_fields(Child)]
        assert names == ["base_name", "nickname", "count"]

    def test_class_vars_are_skipped(self):
        assert "registry_size" not in [f.name for f in deep_fields(Child)]

    def test_annotated_tag_is_read(self):
        nickname = [f for f in deep_fields(Child) if f.name == "nickname"][0]
        assert nickname.tag.lookup("value") == ("${app.name}", True)
        assert nickname.type is str

    def test_dataclass_metadata_is_read(self):
        fields = {f.name: f for f in deep_fields(Record)}
        assert fields["name"].tag.lookup("default") == ("anonymous", True)
        assert fields["owner"].tag.lookup("inject") == ("", True)

    def test_interface_base_becomes_anonymous_field(self):
        fields = deep_fields(Service)
        assert fields[0].anonymous
        assert fields[0].type is Handler
        assert fields[1].name == "label"

    def test_non_struct_type_has_no_fields(self):
        assert deep_fields(int) == []
        assert deep_fields(Handler) == []

    def test_pointer_wrapper_is_stripped(self):
        assert [f.name for f in deep_fields(Optional[Child])] == ["base_name", "nickname", "count"]


class TestCapability:
    """Tests for capability field lookup."""

    def test_direct_capability(self):
        found = find_capability_field(Service())
        assert found.type is Handler
        assert found.anonymous

    def test_inherited_capability(self):
        assert find_capability_field(SpecialService).type is Handler

    def test_absent_capability_is_zero_descriptor(self):
        found = find_capability_field(Base())
        assert found.is_zero
        assert found == FieldDescriptor()
        assert find_capability_field(None).is_zero


class TestSettable:
    """Tests for field settability."""

    def test_public_field_is_settable(self):
        f = FieldDescriptor(name="count", type=int)
        assert is_settable(Child(), f)

    def test_private_field_is_not_settable(self):
        assert not is_settable(Child(), FieldDescriptor(name="_hidden", type=int))

    def test_frozen_dataclass_is_not_settable(self):
        assert not is_settable(FrozenRecord(), FieldDescriptor(name="name", type=str))


class TestObjectNames:
    """Tests for object name helpers."""

    def test_parse_object_name(self):
        class ExampleTag:
            pass

        class Tag:
            pass

        assert parse_object_name(ExampleTag(), "Tag") == "example"
        assert parse_object_name(Tag(), "Tag") == ""

    def test_parse_object_pkg_name(self):
        assert parse_object_pkg_name(Base) == "test_reflector"
