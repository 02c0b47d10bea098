"""Contract tests for adapter protocol compliance."""

from __future__ import annotations

import sqlite3

import pytest

from row_bind.adapters.pool import ConnectionPool
from row_bind.adapters.postgresql import PostgresqlSyncAdapter, _build_conninfo
from row_bind.adapters.protocol import SyncAdapter
from row_bind.adapters.sqlite import SqliteSyncAdapter
from row_bind.core.connection import ConnectionConfig, ConnectionManager
from row_bind.core.exceptions import AdapterError, ConnectionError, PoolError
from row_bind.mapping.source import CursorSource


class TestSqliteSyncAdapterProtocol:
    def test_implements_sync_protocol(self) -> None:
        adapter = SqliteSyncAdapter()
        assert isinstance(adapter, SyncAdapter)

    def test_paramstyle(self) -> None:
        adapter = SqliteSyncAdapter()
        assert adapter.paramstyle == "named"

    def test_driver_errors(self) -> None:
        assert SqliteSyncAdapter().driver_errors() == (sqlite3.Error,)

    def test_prepare_rewrites_marker(self) -> None:
        adapter = SqliteSyncAdapter()
        assert adapter.prepare("SELECT @n, '@n'", "@") == "SELECT :n, '@n'"
        assert adapter.prepare("SELECT $n", "$") == "SELECT :n"

    def test_connect_and_execute(self, sqlite_config: ConnectionConfig) -> None:
        adapter = SqliteSyncAdapter()
        conn = adapter.connect(sqlite_config)
        try:
            cursor = adapter.execute(conn, adapter.prepare("SELECT @n AS val", "@"), {"n": 1})
            source = CursorSource(cursor)
            assert source.field_names() == ["val"]
            assert tuple(source.next_row()) == (1,)  # type: ignore[arg-type]
            source.release()
        finally:
            conn.close()

    def test_execute_without_params(self, sqlite_config: ConnectionConfig) -> None:
        adapter = SqliteSyncAdapter()
        conn = adapter.connect(sqlite_config)
        try:
            assert adapter.execute(conn, "SELECT 1").fetchone() == (1,)
        finally:
            conn.close()

    def test_extra_options_are_passed(self) -> None:
        config = ConnectionConfig(
            driver="sqlite", database=":memory:", extra={"isolation_level": None}
        )
        conn = SqliteSyncAdapter().connect(config)
        try:
            assert conn.isolation_level is None
        finally:
            conn.close()


class TestPostgresqlSyncAdapterProtocol:
    def test_implements_sync_protocol(self) -> None:
        adapter = PostgresqlSyncAdapter()
        assert isinstance(adapter, SyncAdapter)

    def test_paramstyle(self) -> None:
        adapter = PostgresqlSyncAdapter()
        assert adapter.paramstyle == "pyformat"

    def test_prepare_escapes_literal_percent(self) -> None:
        adapter = PostgresqlSyncAdapter()
        sql = "SELECT * FROM t WHERE name LIKE 'a%' AND id = @id AND rate % 2 = 0"
        expected = "SELECT * FROM t WHERE name LIKE 'a%%' AND id = %(id)s AND rate %% 2 = 0"
        assert adapter.prepare(sql, "@") == expected

    def test_prepare_keeps_typecasts(self) -> None:
        adapter = PostgresqlSyncAdapter()
        assert adapter.prepare("SELECT :id::int", ":") == "SELECT %(id)s::int"

    def test_percent_marker_rejected(self) -> None:
        with pytest.raises(AdapterError, match="not supported"):
            PostgresqlSyncAdapter().prepare("SELECT %id", "%")

    def test_driver_errors(self) -> None:
        psycopg = pytest.importorskip("psycopg")
        assert PostgresqlSyncAdapter().driver_errors() == (psycopg.Error,)

    def test_conninfo(self) -> None:
        config = ConnectionConfig(
            driver="postgresql", host="db", port=5432, user="app", password="s3", database="main"
        )
        assert _build_conninfo(config) == "host=db port=5432 user=app password=s3 dbname=main"

    def test_conninfo_database_only(self) -> None:
        config = ConnectionConfig(driver="postgresql", database="main")
        assert _build_conninfo(config) == "dbname=main"


class TestConnectionManager:
    def test_unsupported_driver(self) -> None:
        with pytest.raises(AdapterError, match="Unsupported database driver"):
            ConnectionManager(ConnectionConfig(driver="mssql", database="x"))

    def test_driver_name_is_case_insensitive(self) -> None:
        manager = ConnectionManager(ConnectionConfig(driver="SQLite", database=":memory:"))
        assert isinstance(manager.adapter, SqliteSyncAdapter)

    def test_pool_holds_configured_connections(self) -> None:
        manager = ConnectionManager(
            ConnectionConfig(driver="sqlite", database=":memory:", pool_size=3)
        )
        pool = manager.initialize_pool()
        assert isinstance(pool, ConnectionPool)
        assert (pool.size, pool.idle) == (3, 3)
        assert manager.initialize_pool() is pool
        manager.close_pool()

    def test_exhausted_pool_raises_pool_error(self, sqlite_config: ConnectionConfig) -> None:
        manager = ConnectionManager(sqlite_config)
        conn = manager.acquire()
        try:
            with pytest.raises(PoolError):
                manager.acquire()
        finally:
            manager.release(conn)
            manager.close_pool()

    def test_get_connection_returns_to_pool(self, sqlite_config: ConnectionConfig) -> None:
        manager = ConnectionManager(sqlite_config)
        with manager.get_connection() as conn:
            assert conn.execute("SELECT 1").fetchone() == (1,)
        with manager.get_connection() as again:
            assert again is conn
        manager.close_pool()

    def test_connect_failure_raises_connection_error(self) -> None:
        manager = ConnectionManager(
            ConnectionConfig(driver="sqlite", database="/nonexistent-dir/row_bind.db")
        )
        with pytest.raises(ConnectionError, match="Cannot connect to sqlite database"):
            manager.acquire()

    def test_closed_pool_rejects_acquire(self, sqlite_config: ConnectionConfig) -> None:
        manager = ConnectionManager(sqlite_config)
        manager.close_pool()
        with pytest.raises(PoolError, match="closed"):
            manager.acquire()

    def test_release_after_close_closes_connection(self, sqlite_config: ConnectionConfig) -> None:
        manager = ConnectionManager(sqlite_config)
        conn = manager.acquire()
        manager.close_pool()
        manager.release(conn)
        with pytest.raises(sqlite3.ProgrammingError):
            conn.execute("SELECT 1")
