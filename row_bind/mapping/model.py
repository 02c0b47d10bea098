"""Row-to-model mapper.

Supports dataclasses, Pydantic models, and plain classes. Columns are matched
to fields case-insensitively; unmatched columns are ignored. Every row is
fully materialized and the source is released exactly once, whether mapping
succeeds or fails.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from row_bind.core.enums import Construction, FieldKind
from row_bind.core.exceptions import ConversionError, MappingError
from row_bind.mapping.convert import ConversionResult
from row_bind.mapping.descriptor import (
    DescriptorRegistry,
    MappableField,
    TypeDescriptor,
    default_registry,
)
from row_bind.mapping.protocol import TabularDataSource

T = TypeVar("T")

# (row index, column name, target field)
_ColumnPlan = list[tuple[int, str, MappableField]]


class RowMapper(Generic[T]):
    """Maps rows of a TabularDataSource onto instances of target_class.

    Args:
        target_class: The class to construct for each row.
        registry: Descriptor registry; the process-wide default if omitted.
    """

    def __init__(
        self,
        target_class: type[T],
        registry: DescriptorRegistry | None = None,
    ) -> None:
        self._registry = registry if registry is not None else default_registry
        self._descriptor = self._registry.get(target_class)
        self._converters = self._registry.converters

    @property
    def descriptor(self) -> TypeDescriptor:
        return self._descriptor

    def map_all(self, source: TabularDataSource) -> list[T]:
        """Map every row of source. Releases source on all paths."""
        try:
            plan = self._plan(source.field_names())
            results: list[T] = []
            while True:
                row = source.next_row()
                if row is None:
                    break
                results.append(self._map_row(plan, row))
            return results
        finally:
            source.release()

    def map_first(self, source: TabularDataSource) -> T | None:
        """Map the first row of source, or return None if it has no rows.

        Remaining rows are not mapped; the source is still released.
        """
        try:
            plan = self._plan(source.field_names())
            row = source.next_row()
            if row is None:
                return None
            return self._map_row(plan, row)
        finally:
            source.release()

    def _plan(self, field_names: Any) -> _ColumnPlan:
        plan: _ColumnPlan = []
        for index, column in enumerate(field_names):
            target = self._descriptor.find(column)
            if target is not None:
                plan.append((index, column, target))
        return plan

    def _coerce(self, field: MappableField, value: Any) -> ConversionResult:
        if value is None:
            if (
                self._descriptor.strict_nulls
                and not field.nullable
                and field.kind in (FieldKind.PRIMITIVE, FieldKind.STRING)
            ):
                return ConversionResult.failure("null value for non-nullable field")
            return ConversionResult.success(None)
        return self._converters.convert(value, field.storage_type)

    def _map_row(self, plan: _ColumnPlan, row: Any) -> T:
        values: dict[str, Any] = {}
        for index, column, field in plan:
            result = self._coerce(field, row[index])
            if not result.ok:
                raise ConversionError(
                    column,
                    field.name,
                    field.type_name,
                    self._descriptor.name,
                    result.error,
                )
            values[field.name] = result.value
        return self._construct(values)

    def _construct(self, values: dict[str, Any]) -> T:
        descriptor = self._descriptor
        cls: Any = descriptor.target_class

        if descriptor.construction is Construction.PYDANTIC:
            kwargs = {f.name: None for f in descriptor.fields if not f.has_default}
            kwargs.update(values)
            return cls.model_construct(**kwargs)  # type: ignore[no-any-return]

        if descriptor.construction is Construction.DATACLASS:
            kwargs = {
                f.name: values.get(f.name)
                for f in descriptor.fields
                if f.init and (f.name in values or not f.has_default)
            }
            try:
                instance = cls(**kwargs)
            except TypeError as e:
                raise MappingError(f"Cannot construct {descriptor.name}: {e}") from e
            for f in descriptor.fields:
                if not f.init and f.name in values:
                    object.__setattr__(instance, f.name, values[f.name])
            return instance  # type: ignore[no-any-return]

        if descriptor.construction is Construction.PLAIN:
            instance = cls()
        else:
            instance = cls.__new__(cls)
        for f in descriptor.fields:
            if f.name in values:
                setattr(instance, f.name, values[f.name])
            elif not hasattr(instance, f.name):
                setattr(instance, f.name, None)
        return instance  # type: ignore[no-any-return]


def _mapper_for(
    target_class: type[T],
    source: TabularDataSource,
    registry: DescriptorRegistry | None,
) -> RowMapper[T]:
    try:
        return RowMapper(target_class, registry)
    except MappingError:
        source.release()
        raise


def map_all(
    target_class: type[T],
    source: TabularDataSource,
    registry: DescriptorRegistry | None = None,
) -> list[T]:
    """Map all rows of source to target_class instances."""
    return _mapper_for(target_class, source, registry).map_all(source)


def map_first(
    target_class: type[T],
    source: TabularDataSource,
    registry: DescriptorRegistry | None = None,
) -> T | None:
    """Map the first row of source, or None when there are no rows."""
    return _mapper_for(target_class, source, registry).map_first(source)
