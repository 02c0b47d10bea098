"""Enumerations shared by the descriptor and adapter layers."""

from __future__ import annotations

from enum import Enum


class DatabaseBackend(Enum):
    """Supported database backends."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"


class FieldKind(Enum):
    """Semantic classification of a field's declared type."""

    PRIMITIVE = "primitive"
    NULLABLE_PRIMITIVE = "nullable_primitive"
    STRING = "string"
    OTHER = "other"


class Construction(Enum):
    """How instances of a target type are created by the row mapper."""

    DATACLASS = "dataclass"
    PYDANTIC = "pydantic"
    PLAIN = "plain"  # zero-argument constructor
    BARE = "bare"  # __new__ without running __init__
