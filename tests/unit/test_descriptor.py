"""Unit tests for type descriptors."""

from __future__ import annotations

import abc
from collections.abc import Iterable
from dataclasses import dataclass
from typing import ClassVar, Optional, Protocol

import pytest
from pydantic import BaseModel

from row_bind.core.enums import Construction, FieldKind
from row_bind.core.exceptions import DescriptorError, NoPrimaryKeyError
from row_bind.mapping.convert import ConverterTable
from row_bind.mapping.descriptor import (
    DescriptorRegistry,
    get_primary_key,
    get_valid_fields,
    mappable,
)
from row_bind.repository.base import Repository


class Notifier(Protocol):
    def notify(self) -> None: ...


class Store(abc.ABC):
    @abc.abstractmethod
    def save(self) -> None: ...


class AuditLog:
    pass


@dataclass
class Account:
    ID: int
    NAME: str
    AGE: int


@dataclass
class Customer:
    id: int
    name: str
    nickname: Optional[str] = None
    notifier: Notifier | None = None
    store: Store | None = None
    tags: Iterable[str] = ()
    accounts: Repository[Account] | None = None


@dataclass
class Audited:
    id: int
    log: AuditLog | None = None


@dataclass
class OnlyCapabilities:
    notifier: Notifier


class Empty:
    pass


@dataclass
class CaseTwins:
    id: int
    ID: int


class Reading(BaseModel):
    sensor: str
    value: float
    unit: str = "C"


class Legacy:
    VERSION: ClassVar[int] = 2
    _cache: dict
    code: str
    score: Optional[int]
    blob: list[int]

    def __init__(self) -> None:
        self.code = ""


class TestValidFields:
    def test_ignored_field_is_excluded(self, registry: DescriptorRegistry) -> None:
        registry.register(Account, ignore=["ID"])
        names = [f.name for f in get_valid_fields(Account, registry)]
        assert names == ["NAME", "AGE"]

    def test_primary_key_skips_ignored_field(self, registry: DescriptorRegistry) -> None:
        registry.register(Account, ignore=["ID"])
        assert get_primary_key(Account, registry).name == "NAME"

    def test_interface_and_wrapper_fields_are_excluded(self, registry: DescriptorRegistry) -> None:
        names = [f.name for f in get_valid_fields(Customer, registry)]
        assert names == ["id", "name", "nickname"]

    def test_excluded_fields_stay_on_descriptor(self, registry: DescriptorRegistry) -> None:
        descriptor = registry.get(Customer)
        excluded = [f.name for f in descriptor.fields if f.excluded]
        assert excluded == ["notifier", "store", "tags", "accounts"]

    def test_registered_wrapper_type_is_excluded(self, registry: DescriptorRegistry) -> None:
        registry.register_wrapper_type(AuditLog)
        assert [f.name for f in get_valid_fields(Audited, registry)] == ["id"]

    def test_unregistered_helper_type_is_kept(self, registry: DescriptorRegistry) -> None:
        assert [f.name for f in get_valid_fields(Audited, registry)] == ["id", "log"]

    def test_idempotent(self, registry: DescriptorRegistry) -> None:
        first = get_valid_fields(Customer, registry)
        second = get_valid_fields(Customer, registry)
        assert first == second
        assert registry.get(Customer) is registry.get(Customer)

    def test_pydantic_declaration_order(self, registry: DescriptorRegistry) -> None:
        descriptor = registry.get(Reading)
        assert [f.name for f in descriptor.fields] == ["sensor", "value", "unit"]
        assert descriptor.construction is Construction.PYDANTIC
        assert descriptor.find("unit").has_default  # type: ignore[union-attr]

    def test_plain_class_annotations(self, registry: DescriptorRegistry) -> None:
        descriptor = registry.get(Legacy)
        assert [f.name for f in descriptor.fields] == ["code", "score", "blob"]
        assert descriptor.construction is Construction.PLAIN

    def test_empty_class_has_no_fields(self, registry: DescriptorRegistry) -> None:
        assert get_valid_fields(Empty, registry) == ()

    def test_rejects_non_class(self, registry: DescriptorRegistry) -> None:
        with pytest.raises(DescriptorError, match="Expected a class"):
            registry.get("Account")  # type: ignore[arg-type]


class TestFieldKinds:
    def test_kinds_and_storage_types(self, registry: DescriptorRegistry) -> None:
        descriptor = registry.get(Legacy)
        code, score, blob = descriptor.fields
        assert code.kind is FieldKind.STRING
        assert score.kind is FieldKind.NULLABLE_PRIMITIVE
        assert score.storage_type is int
        assert score.nullable
        assert score.type_name == "int"
        assert blob.kind is FieldKind.OTHER

    def test_optional_string_is_string_kind(self, registry: DescriptorRegistry) -> None:
        nickname = registry.get(Customer).find("nickname")
        assert nickname is not None
        assert nickname.kind is FieldKind.STRING
        assert nickname.nullable

    def test_case_insensitive_find(self, registry: DescriptorRegistry) -> None:
        descriptor = registry.get(Account)
        assert descriptor.find("name") is descriptor.find("NAME")
        assert descriptor.find("missing") is None


class TestPrimaryKey:
    def test_first_field_by_default(self, registry: DescriptorRegistry) -> None:
        assert get_primary_key(Customer, registry).name == "id"

    def test_explicit_primary_key(self, registry: DescriptorRegistry) -> None:
        registry.register(Account, primary_key="AGE")
        assert get_primary_key(Account, registry).name == "AGE"

    def test_explicit_key_resolved_by_exact_name(self, registry: DescriptorRegistry) -> None:
        registry.register(CaseTwins, primary_key="ID")
        assert get_primary_key(CaseTwins, registry).name == "ID"
        assert registry.get(CaseTwins).find("id").name == "id"

    def test_no_fields_raises(self, registry: DescriptorRegistry) -> None:
        with pytest.raises(NoPrimaryKeyError, match="Empty"):
            get_primary_key(Empty, registry)

    def test_only_excluded_fields_raises(self, registry: DescriptorRegistry) -> None:
        with pytest.raises(NoPrimaryKeyError):
            get_primary_key(OnlyCapabilities, registry)

    def test_excluded_primary_key_rejected(self, registry: DescriptorRegistry) -> None:
        with pytest.raises(DescriptorError, match="Primary key 'ID'"):
            registry.register(Account, ignore=["ID"], primary_key="ID")

    def test_unknown_primary_key_rejected(self, registry: DescriptorRegistry) -> None:
        with pytest.raises(DescriptorError):
            registry.register(Account, primary_key="uuid")


class TestRegistration:
    def test_is_excluded_type(self, registry: DescriptorRegistry) -> None:
        assert registry.is_excluded_type(Notifier)
        assert registry.is_excluded_type(Repository)
        assert not registry.is_excluded_type(int)

    def test_unknown_ignore_name_rejected(self, registry: DescriptorRegistry) -> None:
        with pytest.raises(DescriptorError, match="ignore list"):
            registry.register(Account, ignore=["SALARY"])

    def test_missing_converter_rejected(self) -> None:
        registry = DescriptorRegistry(converters=ConverterTable())
        with pytest.raises(DescriptorError, match="No converter for field 'ID'"):
            registry.register(Account)

    def test_register_replaces_cached_descriptor(self, registry: DescriptorRegistry) -> None:
        implicit = registry.get(Account)
        explicit = registry.register(Account, ignore=["AGE"])
        assert registry.get(Account) is explicit
        assert implicit is not explicit
        assert len(registry) == 1

    def test_strict_nulls_inherits_registry_default(self) -> None:
        registry = DescriptorRegistry(strict_nulls=True)
        assert registry.get(Account).strict_nulls
        assert not registry.register(Account, strict_nulls=False).strict_nulls

    def test_mappable_decorator(self, registry: DescriptorRegistry) -> None:
        @mappable(ignore=["secret"], primary_key="code", registry=registry)
        @dataclass
        class Token:
            secret: str
            code: str

        assert registry.has(Token)
        assert [f.name for f in get_valid_fields(Token, registry)] == ["code"]
        assert get_primary_key(Token, registry).name == "code"

    def test_bare_mappable_decorator_uses_default_registry(self) -> None:
        @mappable
        @dataclass
        class Badge:
            number: int

        assert [f.name for f in get_valid_fields(Badge)] == ["number"]
