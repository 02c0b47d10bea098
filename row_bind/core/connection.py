"""Connection configuration and management.

ConnectionConfig and BindingOptions are Pydantic models for type-safe
configuration. ConnectionManager uses the SyncAdapter protocol for
pool-based connection lifecycle.
"""

from __future__ import annotations

import importlib
import logging
from contextlib import contextmanager
from typing import Any

from pydantic import BaseModel, field_validator

from row_bind.adapters.pool import ConnectionPool
from row_bind.core.enums import DatabaseBackend
from row_bind.core.exceptions import AdapterError, ConnectionError, PoolError

logger = logging.getLogger(__name__)


class ConnectionConfig(BaseModel):
    """Configuration for database connections."""

    driver: str
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str
    pool_size: int = 5
    extra: dict[str, Any] = {}


class BindingOptions(BaseModel):
    """Parameter binding options used by the Engine."""

    marker: str = "@"

    @field_validator("marker")
    @classmethod
    def check_marker(cls, value: str) -> str:
        if len(value) != 1 or value.isalnum() or value == "_" or value.isspace():
            raise ValueError("marker must be a single non-word, non-space character")
        return value


# Adapter module mapping: backend -> (module_path, class_name)
_ADAPTER_MAP: dict[DatabaseBackend, tuple[str, str]] = {
    DatabaseBackend.SQLITE: ("row_bind.adapters.sqlite", "SqliteSyncAdapter"),
    DatabaseBackend.POSTGRESQL: ("row_bind.adapters.postgresql", "PostgresqlSyncAdapter"),
}


def _load_adapter(driver: str) -> Any:
    """Load a sync adapter by driver name."""
    try:
        backend = DatabaseBackend(driver.lower())
    except ValueError:
        raise AdapterError(f"Unsupported database driver: {driver}") from None

    module_path, cls_name = _ADAPTER_MAP[backend]
    try:
        module = importlib.import_module(module_path)
        return getattr(module, cls_name)()
    except (ImportError, AttributeError) as e:
        raise AdapterError(f"Failed to load adapter for '{driver}': {e}") from e


class ConnectionManager:
    """Synchronous connection manager using SyncAdapter protocol.

    The pool is opened on first use. Closing it is final: later acquires
    raise PoolError.
    """

    def __init__(self, config: ConnectionConfig) -> None:
        self.config = config
        self._adapter = _load_adapter(config.driver)
        self._pool: ConnectionPool | None = None

    @property
    def adapter(self) -> Any:
        return self._adapter

    def initialize_pool(self) -> ConnectionPool:
        """Open ``pool_size`` connections and pool them."""
        if self._pool is None:
            self._pool = ConnectionPool(self._open_connections())
            logger.debug(
                "Opened %d %s connection(s)", self.config.pool_size, self.config.driver
            )
        return self._pool

    def _open_connections(self) -> list[Any]:
        try:
            errors = self._adapter.driver_errors()
        except ImportError as e:
            raise AdapterError(f"Driver for '{self.config.driver}' is not installed: {e}") from e
        connections: list[Any] = []
        try:
            for _ in range(self.config.pool_size):
                connections.append(self._adapter.connect(self.config))
        except errors as e:
            for conn in connections:
                conn.close()
            raise ConnectionError(
                f"Cannot connect to {self.config.driver} database "
                f"'{self.config.database}': {e}"
            ) from e
        return connections

    def acquire(self) -> Any:
        """Take a connection from the pool. Pair with release()."""
        return self.initialize_pool().acquire()

    def release(self, connection: Any) -> None:
        """Return a connection taken with acquire()."""
        if self._pool is None:
            raise PoolError("Connection pool was never opened")
        self._pool.release(connection)

    @contextmanager
    def get_connection(self):  # type: ignore[no-untyped-def]
        """Get a connection from the pool as a context manager."""
        connection = self.acquire()
        try:
            yield connection
        finally:
            self.release(connection)

    def close_pool(self) -> None:
        """Close the connection pool."""
        if self._pool is None:
            self._pool = ConnectionPool([])
        self._pool.close()
