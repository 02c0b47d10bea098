"""PostgreSQL adapter using psycopg (v3+).

psycopg is imported lazily so the package works without the ``postgresql``
extra installed.
"""

from __future__ import annotations

from typing import Any

from row_bind.core.connection import ConnectionConfig
from row_bind.core.exceptions import AdapterError
from row_bind.core.params import normalize_params


def _build_conninfo(config: ConnectionConfig) -> str:
    """Build a libpq connection string from config fields."""
    parts: list[str] = []
    if config.host is not None:
        parts.append(f"host={config.host}")
    if config.port is not None:
        parts.append(f"port={config.port}")
    if config.user is not None:
        parts.append(f"user={config.user}")
    if config.password is not None:
        parts.append(f"password={config.password}")
    parts.append(f"dbname={config.database}")
    return " ".join(parts)


class PostgresqlSyncAdapter:
    """Synchronous PostgreSQL adapter.

    Keeps psycopg's default tuple rows; CursorSource reads column names from
    ``cursor.description`` as it does for SQLite.
    """

    @property
    def paramstyle(self) -> str:
        return "pyformat"

    def driver_errors(self) -> tuple[type[Exception], ...]:
        import psycopg

        return (psycopg.Error,)

    def connect(self, config: ConnectionConfig) -> Any:
        import psycopg

        return psycopg.connect(_build_conninfo(config), **config.extra)

    def prepare(self, sql: str, marker: str) -> str:
        if marker == "%":
            raise AdapterError("The % parameter marker is not supported by psycopg")
        # psycopg treats every % as a placeholder once parameters are passed
        return normalize_params(sql.replace("%", "%%"), self.paramstyle, marker)

    def execute(
        self,
        connection: Any,
        sql: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        return connection.execute(sql, params if params is not None else {})
