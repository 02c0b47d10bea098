"""row_bind exception hierarchy.

All exceptions derive from RowBindError. Raw driver exceptions are wrapped
at the engine boundary and never reach callers unchanged.
"""

from __future__ import annotations


class RowBindError(Exception):
    """Base exception for all row_bind errors."""


# --- Mapping ---


class MappingError(RowBindError):
    """Base for mapping errors."""


class ConversionError(MappingError):
    """Raised when a column value cannot be coerced to a field's storage type."""

    def __init__(
        self,
        column: str,
        field_name: str,
        type_name: str,
        owner_name: str,
        detail: str | None = None,
    ) -> None:
        self.column = column
        self.field_name = field_name
        self.type_name = type_name
        self.owner_name = owner_name
        self.detail = detail
        message = (
            f"Cannot convert column '{column}' to field '{field_name}' "
            f"({type_name}) of {owner_name}.{field_name}"
        )
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class DescriptorError(MappingError):
    """Raised when a type descriptor cannot be built or registered."""


class NoPrimaryKeyError(DescriptorError):
    """Raised when a primary key is requested for a type without mappable fields."""

    def __init__(self, owner_name: str) -> None:
        self.owner_name = owner_name
        super().__init__(f"{owner_name} has no mappable fields to use as primary key")


# --- Execution ---


class ExecutionError(RowBindError):
    """Base for query execution errors."""


class ParameterBindingError(ExecutionError):
    """Raised when the driver rejects a statement or its bound parameters."""

    def __init__(self, sql: str, detail: str) -> None:
        self.sql = sql
        super().__init__(f"Parameter binding error for '{sql}': {detail}")


# --- Adapter ---


class AdapterError(RowBindError):
    """Base for adapter errors."""


class ConnectionError(AdapterError):  # noqa: A001
    """Raised on connection failures."""


class PoolError(AdapterError):
    """Raised on connection pool failures."""
