"""Type descriptors - the ordered, mappable fields of a target class.

Descriptors are built once per class, either through explicit registration
(``register`` / ``@mappable``) or implicitly on first use, and cached by a
DescriptorRegistry for the lifetime of the process.

Field order follows declaration order:
    dataclass        -> dataclasses.fields()
    Pydantic model   -> model_fields
    plain class      -> class annotations (base classes first)

A field is excluded from the valid field list when its type is an interface
(Protocol, abstract class or collections.abc type), a query/command wrapper
type, or when its name is listed in the registration-time ``ignore`` list.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import datetime as dt
import inspect
import logging
import threading
import types
import typing
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, ClassVar, TypeVar, Union, get_args, get_origin

from pydantic import BaseModel

from row_bind.core.enums import Construction, FieldKind
from row_bind.core.exceptions import DescriptorError, NoPrimaryKeyError
from row_bind.mapping.convert import DEFAULT_CONVERTERS, ConverterTable, type_name

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=type)

_PRIMITIVE_TYPES: frozenset[type] = frozenset(
    {int, float, bool, Decimal, dt.datetime, dt.date, dt.time, uuid.UUID, bytes}
)

_CONVERTIBLE_KINDS = (FieldKind.PRIMITIVE, FieldKind.NULLABLE_PRIMITIVE, FieldKind.STRING)


class WrapperMarker:
    """Base for query/command helper types that are never mapped as fields."""


@dataclass(frozen=True)
class MappableField:
    """A single field of a target class."""

    name: str
    declared_type: Any
    storage_type: Any
    kind: FieldKind
    nullable: bool = False
    excluded: bool = False
    has_default: bool = False
    init: bool = True

    @property
    def type_name(self) -> str:
        return type_name(self.storage_type)


@dataclass(frozen=True)
class TypeDescriptor:
    """Read-only mapping metadata for one target class."""

    target_class: type
    fields: tuple[MappableField, ...]
    construction: Construction
    primary_key_name: str | None = None
    strict_nulls: bool = False
    _lookup: dict[str, MappableField] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        lookup: dict[str, MappableField] = {}
        for f in self.fields:
            # First declared field wins on a case-insensitive collision
            lookup.setdefault(f.name.casefold(), f)
        object.__setattr__(self, "_lookup", lookup)

    @property
    def name(self) -> str:
        return self.target_class.__name__

    def valid_fields(self) -> tuple[MappableField, ...]:
        """Non-excluded fields in declaration order."""
        return tuple(f for f in self.fields if not f.excluded)

    def find(self, name: str) -> MappableField | None:
        """Case-insensitive lookup over every declared field."""
        return self._lookup.get(name.casefold())

    def primary_key(self) -> MappableField:
        """The registered primary key, or the first valid field.

        Raises:
            NoPrimaryKeyError: If the class has no valid fields.
        """
        if self.primary_key_name is not None:
            # Exact name; the casefolded lookup keeps only the first of colliding names
            return next(f for f in self.fields if f.name == self.primary_key_name)
        valid = self.valid_fields()
        if not valid:
            raise NoPrimaryKeyError(self.name)
        return valid[0]


# ---------------------------------------------------------------------------
# Field discovery
# ---------------------------------------------------------------------------


def _unwrap_optional(tp: Any) -> tuple[Any, bool]:
    """Return (inner_type, nullable) for Optional[X] / X | None."""
    origin = get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(tp) if a is not type(None)]
        nullable = len(args) != len(get_args(tp))
        if nullable and len(args) == 1:
            return args[0], True
        return tp, nullable
    return tp, False


def _classify(storage_type: Any, nullable: bool) -> FieldKind:
    if storage_type is str:
        return FieldKind.STRING
    if storage_type in _PRIMITIVE_TYPES:
        return FieldKind.NULLABLE_PRIMITIVE if nullable else FieldKind.PRIMITIVE
    return FieldKind.OTHER


def _is_interface(tp: Any) -> bool:
    origin = get_origin(tp) or tp
    if not isinstance(origin, type):
        return False
    if getattr(origin, "_is_protocol", False):
        return True
    if origin.__module__ == collections.abc.__name__:
        return True
    return inspect.isabstract(origin)


def _resolve_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError) as e:
        raise DescriptorError(f"Cannot resolve type hints of {cls.__name__}: {e}") from e


def _accepts_no_arguments(cls: type) -> bool:
    try:
        sig = inspect.signature(cls)
    except (ValueError, TypeError):
        return False
    return all(
        p.default is not inspect.Parameter.empty
        or p.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        for p in sig.parameters.values()
    )


def _declared_fields(cls: type) -> tuple[list[tuple[str, Any, bool, bool]], Construction]:
    """Extract (name, type, has_default, init) tuples and the construction strategy."""
    if issubclass(cls, BaseModel):
        return [
            (name, info.annotation, not info.is_required(), True)
            for name, info in cls.model_fields.items()  # type: ignore[attr-defined]
        ], Construction.PYDANTIC

    if dataclasses.is_dataclass(cls):
        hints = _resolve_hints(cls)
        return [
            (
                f.name,
                hints.get(f.name, f.type),
                f.default is not dataclasses.MISSING
                or f.default_factory is not dataclasses.MISSING,
                f.init,
            )
            for f in dataclasses.fields(cls)
        ], Construction.DATACLASS

    hints = _resolve_hints(cls)
    declared = [
        (name, tp, hasattr(cls, name), True)
        for name, tp in hints.items()
        if not name.startswith("_") and get_origin(tp) is not ClassVar
    ]
    construction = Construction.PLAIN if _accepts_no_arguments(cls) else Construction.BARE
    return declared, construction


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class DescriptorRegistry:
    """Builds and caches TypeDescriptors.

    Reads are lock-free; population is guarded so that concurrent implicit
    registration of the same class stores a single descriptor.

    Args:
        converters: Conversion table used to validate field storage types.
        strict_nulls: Default null policy for descriptors registered
            without an explicit ``strict_nulls``.
    """

    def __init__(
        self,
        converters: ConverterTable | None = None,
        strict_nulls: bool = False,
    ) -> None:
        self._converters = converters if converters is not None else DEFAULT_CONVERTERS
        self._strict_nulls = strict_nulls
        self._descriptors: dict[type, TypeDescriptor] = {}
        self._wrapper_types: set[type] = set()
        self._lock = threading.Lock()

    @property
    def converters(self) -> ConverterTable:
        return self._converters

    def register_wrapper_type(self, wrapper_type: type) -> None:
        """Treat fields of wrapper_type (or subclasses) as excluded.

        Only affects descriptors built after the call.
        """
        with self._lock:
            self._wrapper_types.add(wrapper_type)

    def register(
        self,
        target_class: type,
        *,
        ignore: Iterable[str] = (),
        primary_key: str | None = None,
        strict_nulls: bool | None = None,
    ) -> TypeDescriptor:
        """Build and store the descriptor for target_class, replacing any cached one.

        Raises:
            DescriptorError: On unknown ignore/primary key names, or a field whose
                storage type has no converter.
        """
        descriptor = self._build(target_class, ignore, primary_key, strict_nulls)
        with self._lock:
            self._descriptors[target_class] = descriptor
        logger.debug(
            "Registered descriptor for %s: %s",
            descriptor.name,
            [f.name for f in descriptor.valid_fields()],
        )
        return descriptor

    def get(self, target_class: type) -> TypeDescriptor:
        """Return the cached descriptor, building it with defaults if needed."""
        descriptor = self._descriptors.get(target_class)
        if descriptor is not None:
            return descriptor
        built = self._build(target_class, (), None, None)
        with self._lock:
            return self._descriptors.setdefault(target_class, built)

    def has(self, target_class: type) -> bool:
        return target_class in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)

    def is_excluded_type(self, tp: Any) -> bool:
        """True for interface and wrapper types, which are never mapped or bound."""
        return _is_interface(tp) or self._is_wrapper(tp)

    def _is_wrapper(self, tp: Any) -> bool:
        origin = get_origin(tp) or tp
        if not isinstance(origin, type):
            return False
        if issubclass(origin, WrapperMarker):
            return True
        return any(issubclass(origin, w) for w in self._wrapper_types)

    def _build(
        self,
        target_class: type,
        ignore: Iterable[str],
        primary_key: str | None,
        strict_nulls: bool | None,
    ) -> TypeDescriptor:
        if not isinstance(target_class, type):
            raise DescriptorError(f"Expected a class, got {target_class!r}")

        declared, construction = _declared_fields(target_class)
        names = {name for name, *_ in declared}
        ignored = set(ignore)
        unknown = ignored - names
        if unknown:
            raise DescriptorError(
                f"Unknown field(s) in ignore list of {target_class.__name__}: {sorted(unknown)}"
            )

        fields: list[MappableField] = []
        for name, declared_type, has_default, init in declared:
            storage_type, nullable = _unwrap_optional(declared_type)
            kind = _classify(storage_type, nullable)
            if kind in _CONVERTIBLE_KINDS and not self._converters.supports(storage_type):
                raise DescriptorError(
                    f"No converter for field '{name}' ({type_name(storage_type)}) "
                    f"of {target_class.__name__}"
                )
            excluded = name in ignored or self.is_excluded_type(storage_type)
            fields.append(
                MappableField(
                    name=name,
                    declared_type=declared_type,
                    storage_type=storage_type,
                    kind=kind,
                    nullable=nullable,
                    excluded=excluded,
                    has_default=has_default,
                    init=init,
                )
            )

        if primary_key is not None:
            key_field = next((f for f in fields if f.name == primary_key), None)
            if key_field is None or key_field.excluded:
                raise DescriptorError(
                    f"Primary key '{primary_key}' is not a mappable field "
                    f"of {target_class.__name__}"
                )

        return TypeDescriptor(
            target_class=target_class,
            fields=tuple(fields),
            construction=construction,
            primary_key_name=primary_key,
            strict_nulls=self._strict_nulls if strict_nulls is None else strict_nulls,
        )


default_registry = DescriptorRegistry()


# ---------------------------------------------------------------------------
# Module-level API over the default registry
# ---------------------------------------------------------------------------


def get_descriptor(
    target_class: type, registry: DescriptorRegistry | None = None
) -> TypeDescriptor:
    return (registry if registry is not None else default_registry).get(target_class)


def get_valid_fields(
    target_class: type, registry: DescriptorRegistry | None = None
) -> tuple[MappableField, ...]:
    """Ordered mappable fields of target_class, excluded fields removed."""
    return get_descriptor(target_class, registry).valid_fields()


def get_primary_key(
    target_class: type, registry: DescriptorRegistry | None = None
) -> MappableField:
    """Primary key field of target_class.

    Raises:
        NoPrimaryKeyError: If target_class has no mappable fields.
    """
    return get_descriptor(target_class, registry).primary_key()


def register_wrapper_type(wrapper_type: type) -> None:
    default_registry.register_wrapper_type(wrapper_type)


def mappable(
    cls: C | None = None,
    *,
    ignore: Iterable[str] = (),
    primary_key: str | None = None,
    strict_nulls: bool | None = None,
    registry: DescriptorRegistry | None = None,
) -> Any:
    """Class decorator registering a descriptor at definition time.

    Usable bare (``@mappable``) or with options
    (``@mappable(ignore=["cache"], primary_key="id")``).
    """
    target_registry = registry if registry is not None else default_registry

    def _register(target: C) -> C:
        target_registry.register(
            target, ignore=ignore, primary_key=primary_key, strict_nulls=strict_nulls
        )
        return target

    if cls is not None:
        return _register(cls)
    return _register

