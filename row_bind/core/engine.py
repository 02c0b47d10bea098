"""Query execution engine and convenience query API.

The Engine binds parameters against the SQL text, executes through the
adapter, and hands results back as a TabularDataSource. query_all and
query_first compose binding, execution and row mapping for any
QueryExecutionContext, not only the Engine.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from row_bind.core.connection import BindingOptions, ConnectionConfig, ConnectionManager
from row_bind.core.exceptions import ParameterBindingError
from row_bind.core.params import DEFAULT_MARKER, ParameterSet, bind_parameters
from row_bind.mapping.descriptor import DescriptorRegistry, default_registry
from row_bind.mapping.model import RowMapper
from row_bind.mapping.protocol import QueryExecutionContext, TabularDataSource
from row_bind.mapping.source import CursorSource

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Engine:
    """Synchronous query execution engine.

    Implements QueryExecutionContext. Parameters are written in the query
    with the configured marker (``@name`` by default) and may be passed as a
    mapping or as any object with mappable fields.
    """

    def __init__(
        self,
        connection_manager: ConnectionManager,
        options: BindingOptions | None = None,
        registry: DescriptorRegistry | None = None,
    ) -> None:
        self._connection_manager = connection_manager
        self._options = options if options is not None else BindingOptions()
        self._registry = registry if registry is not None else default_registry

    @classmethod
    def from_config(
        cls,
        config: ConnectionConfig,
        options: BindingOptions | None = None,
        registry: DescriptorRegistry | None = None,
    ) -> Engine:
        """Create an Engine from a ConnectionConfig."""
        return cls(ConnectionManager(config), options, registry)

    @property
    def options(self) -> BindingOptions:
        return self._options

    @property
    def registry(self) -> DescriptorRegistry:
        return self._registry

    def _prepare(self, sql: str, params: Any) -> tuple[str, dict[str, Any]]:
        # An already bound ParameterSet is used as-is, with its own marker
        if isinstance(params, ParameterSet):
            bound, marker = params, params.marker
        else:
            marker = self._options.marker
            bound = bind_parameters(sql, params, marker=marker, registry=self._registry)
        statement = self._connection_manager.adapter.prepare(sql, marker)
        return statement, bound.as_dict()

    def execute(self, sql: str, params: Any = None) -> CursorSource:
        """Execute a query and return an open source over its rows.

        The pooled connection stays checked out until the source is released.
        """
        statement, bound = self._prepare(sql, params)
        manager = self._connection_manager
        conn = manager.acquire()
        logger.debug("Executing %s with %d parameter(s)", statement, len(bound))
        try:
            cursor = manager.adapter.execute(conn, statement, bound)
        except manager.adapter.driver_errors() as e:
            manager.release(conn)
            raise ParameterBindingError(sql, str(e)) from e
        except BaseException:
            manager.release(conn)
            raise
        return CursorSource(cursor, on_release=lambda: manager.release(conn))

    def run(self, sql: str, params: Any = None) -> int:
        """Execute a write statement and commit. Returns affected row count."""
        statement, bound = self._prepare(sql, params)
        with self._connection_manager.get_connection() as conn:
            logger.debug("Running %s with %d parameter(s)", statement, len(bound))
            try:
                cursor = self._connection_manager.adapter.execute(conn, statement, bound)
            except self._connection_manager.adapter.driver_errors() as e:
                raise ParameterBindingError(sql, str(e)) from e

            conn.commit()
            return int(cursor.rowcount)

    def scalar(self, sql: str, params: Any = None) -> Any:
        """Fetch a single scalar value (first column of first row)."""
        source = self.execute(sql, params)
        try:
            row = source.next_row()
            if row is None:
                return None
            return row[0]
        finally:
            source.release()

    def all(self, target_class: type[T], sql: str, params: Any = None) -> list[T]:
        """Execute sql and map every row to target_class."""
        return query_all(self, target_class, sql, params)

    def first(self, target_class: type[T], sql: str, params: Any = None) -> T | None:
        """Execute sql and map the first row to target_class, or return None."""
        return query_first(self, target_class, sql, params)

    def close(self) -> None:
        """Close the underlying connection pool."""
        self._connection_manager.close_pool()


def _open(
    engine: QueryExecutionContext,
    target_class: type[T],
    sql: str,
    params: Any,
    marker: str | None,
    registry: DescriptorRegistry | None,
) -> tuple[RowMapper[T], TabularDataSource]:
    if isinstance(engine, Engine):
        marker = marker or engine.options.marker
        registry = registry if registry is not None else engine.registry
    mapper = RowMapper(target_class, registry)
    bound = bind_parameters(sql, params, marker=marker or DEFAULT_MARKER, registry=registry)
    source = engine.execute(sql, bound)
    return mapper, source


def query_all(
    engine: QueryExecutionContext,
    target_class: type[T],
    sql: str,
    params: Any = None,
    *,
    marker: str | None = None,
    registry: DescriptorRegistry | None = None,
) -> list[T]:
    """Bind params against sql, execute through engine, map all rows.

    Raises:
        ConversionError: If a column value cannot be coerced; no partial
            results are returned.
    """
    mapper, source = _open(engine, target_class, sql, params, marker, registry)
    return mapper.map_all(source)


def query_first(
    engine: QueryExecutionContext,
    target_class: type[T],
    sql: str,
    params: Any = None,
    *,
    marker: str | None = None,
    registry: DescriptorRegistry | None = None,
) -> T | None:
    """Like query_all, but return only the first mapped row or None."""
    mapper, source = _open(engine, target_class, sql, params, marker, registry)
    return mapper.map_first(source)

