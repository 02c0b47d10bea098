"""Value conversion table.

A closed table mapping (source representation, target type) pairs to
converter functions. Lookups walk the source value's MRO, so an entry for
``int`` also serves ``bool`` unless ``bool`` has its own entry.

Conversions return a ConversionResult instead of raising; the row mapper
decides how a failure is surfaced.
"""

from __future__ import annotations

import datetime as dt
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, get_origin

Converter = Callable[[Any], Any]


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of a single value conversion."""

    ok: bool
    value: Any = None
    error: str | None = None

    @classmethod
    def success(cls, value: Any) -> ConversionResult:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str) -> ConversionResult:
        return cls(ok=False, error=error)


def type_name(tp: Any) -> str:
    """Readable name for a type or typing construct."""
    return getattr(tp, "__name__", None) or repr(tp)


def _is_instance(value: Any, target_type: Any) -> bool:
    origin = get_origin(target_type) or target_type
    if origin is Any or not isinstance(origin, type):
        # Any, TypeVar and similar constructs accept every value
        return True
    return isinstance(value, origin)


def _parse_bool(value: str) -> bool:
    text = value.strip().lower()
    if text in ("true", "1"):
        return True
    if text in ("false", "0"):
        return False
    raise ValueError(f"'{value}' is not a valid boolean")


def _identity(value: Any) -> Any:
    return value


def _isoformat(value: Any) -> str:
    return value.isoformat()


class ConverterTable:
    """Registry of converters keyed by target type, then by source type."""

    def __init__(self) -> None:
        self._entries: dict[Any, dict[type, Converter]] = {}

    def register(self, source_type: type, target_type: Any, converter: Converter) -> None:
        """Add or replace the converter used for source_type -> target_type."""
        self._entries.setdefault(target_type, {})[source_type] = converter

    def supports(self, target_type: Any) -> bool:
        """True if at least one converter targets target_type."""
        return target_type in self._entries

    @property
    def targets(self) -> frozenset[Any]:
        return frozenset(self._entries)

    def convert(self, value: Any, target_type: Any) -> ConversionResult:
        """Convert value to target_type.

        Falls back to passing the value through unchanged when no converter
        applies but the value already is an instance of the target type.
        """
        converters = self._entries.get(target_type)
        if converters:
            for klass in type(value).__mro__:
                converter = converters.get(klass)
                if converter is None:
                    continue
                try:
                    return ConversionResult.success(converter(value))
                except (ValueError, TypeError, ArithmeticError) as e:
                    return ConversionResult.failure(str(e))

        if _is_instance(value, target_type):
            return ConversionResult.success(value)
        return ConversionResult.failure(
            f"no conversion from {type(value).__name__} to {type_name(target_type)}"
        )

    def copy(self) -> ConverterTable:
        table = ConverterTable()
        table._entries = {target: dict(sources) for target, sources in self._entries.items()}
        return table


def default_converter_table() -> ConverterTable:
    """Build the standard table covering the primitive storage types."""
    table = ConverterTable()

    # int: floats and decimals round half to even
    table.register(int, int, _identity)
    table.register(bool, int, int)
    table.register(float, int, round)
    table.register(Decimal, int, round)
    table.register(str, int, lambda v: int(v.strip()))

    table.register(float, float, _identity)
    table.register(int, float, float)
    table.register(Decimal, float, float)
    table.register(str, float, lambda v: float(v.strip()))

    table.register(Decimal, Decimal, _identity)
    table.register(int, Decimal, Decimal)
    table.register(float, Decimal, lambda v: Decimal(str(v)))
    table.register(str, Decimal, lambda v: Decimal(v.strip()))

    table.register(bool, bool, _identity)
    table.register(int, bool, bool)
    table.register(str, bool, _parse_bool)

    table.register(str, str, _identity)
    for source in (int, float, Decimal, bool, uuid.UUID):
        table.register(source, str, str)
    for source in (dt.datetime, dt.date, dt.time):
        table.register(source, str, _isoformat)
    table.register(bytes, str, lambda v: v.decode("utf-8"))

    table.register(dt.datetime, dt.datetime, _identity)
    table.register(dt.date, dt.datetime, lambda v: dt.datetime.combine(v, dt.time()))
    table.register(str, dt.datetime, lambda v: dt.datetime.fromisoformat(v.strip()))

    table.register(dt.date, dt.date, _identity)
    table.register(dt.datetime, dt.date, lambda v: v.date())
    table.register(str, dt.date, lambda v: dt.date.fromisoformat(v.strip()))

    table.register(dt.time, dt.time, _identity)
    table.register(str, dt.time, lambda v: dt.time.fromisoformat(v.strip()))

    table.register(uuid.UUID, uuid.UUID, _identity)
    table.register(str, uuid.UUID, lambda v: uuid.UUID(v.strip()))
    table.register(bytes, uuid.UUID, lambda v: uuid.UUID(bytes=v))

    table.register(bytes, bytes, _identity)
    table.register(bytearray, bytes, bytes)
    table.register(memoryview, bytes, bytes)
    table.register(str, bytes, lambda v: v.encode("utf-8"))

    return table


DEFAULT_CONVERTERS = default_converter_table()
