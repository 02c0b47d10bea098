"""Repository base class.

Thin typed wrapper over a QueryExecutionContext and one target class.
Repositories are WrapperMarker types, so a model may hold one as a field
without it being treated as a mappable column or parameter.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from row_bind.core.engine import Engine, query_all, query_first
from row_bind.mapping.descriptor import (
    DescriptorRegistry,
    MappableField,
    WrapperMarker,
    default_registry,
)
from row_bind.mapping.protocol import QueryExecutionContext

T = TypeVar("T")


class Repository(WrapperMarker, Generic[T]):
    """Base repository class.

    Subclasses define concrete data access methods in terms of ``all`` and
    ``first``.

    Args:
        engine: Any QueryExecutionContext, usually an Engine.
        target_class: Class every row is mapped to.
        registry: Descriptor registry; defaults to the engine's or the
            process-wide one.
    """

    def __init__(
        self,
        engine: QueryExecutionContext,
        target_class: type[T],
        registry: DescriptorRegistry | None = None,
    ) -> None:
        self.engine = engine
        self.target_class = target_class
        if registry is None and isinstance(engine, Engine):
            registry = engine.registry
        self._registry: DescriptorRegistry = (
            registry if registry is not None else default_registry
        )

    def all(self, sql: str, params: Any = None) -> list[T]:
        return query_all(self.engine, self.target_class, sql, params, registry=self._registry)

    def first(self, sql: str, params: Any = None) -> T | None:
        return query_first(self.engine, self.target_class, sql, params, registry=self._registry)

    @property
    def primary_key(self) -> MappableField:
        """Primary key field of the target class."""
        return self._registry.get(self.target_class).primary_key()

    def key_of(self, instance: T) -> Any:
        """Primary key value of instance."""
        return getattr(instance, self.primary_key.name)
