"""SQLite adapter using stdlib sqlite3."""

from __future__ import annotations

import sqlite3
from typing import Any

from row_bind.core.connection import ConnectionConfig
from row_bind.core.params import normalize_params


class SqliteSyncAdapter:
    """Synchronous SQLite adapter.

    Rows come back as plain tuples; CursorSource reads column names from
    ``cursor.description``. Connections may be released from another thread
    than the one that opened them, so ``check_same_thread`` defaults to off.
    """

    @property
    def paramstyle(self) -> str:
        return "named"

    def driver_errors(self) -> tuple[type[Exception], ...]:
        return (sqlite3.Error,)

    def connect(self, config: ConnectionConfig) -> sqlite3.Connection:
        options = {"check_same_thread": False, **config.extra}
        return sqlite3.connect(config.database, **options)

    def prepare(self, sql: str, marker: str) -> str:
        return normalize_params(sql, self.paramstyle, marker)

    def execute(
        self,
        connection: sqlite3.Connection,
        sql: str,
        params: dict[str, Any] | None = None,
    ) -> sqlite3.Cursor:
        return connection.execute(sql, params if params is not None else {})
