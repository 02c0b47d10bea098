"""Database adapter protocol.

Every adapter module MUST implement this protocol so the Engine can treat
all backends alike. Pooling is not part of it; ConnectionManager keeps the
connections an adapter opens in a ConnectionPool.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from row_bind.core.connection import ConnectionConfig


@runtime_checkable
class SyncAdapter(Protocol):
    """Synchronous database adapter protocol."""

    @property
    def paramstyle(self) -> str:
        """Parameter binding style: 'named' (:name) or 'pyformat' (%(name)s)."""
        ...

    def driver_errors(self) -> tuple[type[Exception], ...]:
        """Exception classes the driver raises for failed statements or connects."""
        ...

    def connect(self, config: ConnectionConfig) -> Any:
        """Open one DB-API connection."""
        ...

    def prepare(self, sql: str, marker: str) -> str:
        """Rewrite marker-prefixed parameters into the driver's paramstyle."""
        ...

    def execute(
        self,
        connection: Any,
        sql: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Execute prepared SQL and return a DB-API cursor."""
        ...
