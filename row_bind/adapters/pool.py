"""Fixed-size connection pool shared by all adapters.

Adapters only open connections; checkout and return happen here under a
lock, so an Engine may be used from several threads.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from row_bind.core.exceptions import PoolError

logger = logging.getLogger(__name__)


class ConnectionPool:
    """Hands out a fixed set of open DB-API connections.

    Connections checked out when the pool is closed are closed as they are
    released.
    """

    def __init__(self, connections: list[Any]) -> None:
        self._idle = list(connections)
        self._in_use: list[Any] = []
        self._closed = False
        self._lock = threading.Lock()

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._idle) + len(self._in_use)

    @property
    def idle(self) -> int:
        with self._lock:
            return len(self._idle)

    @property
    def closed(self) -> bool:
        return self._closed

    def owns(self, connection: Any) -> bool:
        with self._lock:
            return any(c is connection for c in self._in_use)

    def acquire(self) -> Any:
        with self._lock:
            if self._closed:
                raise PoolError("Connection pool is closed")
            if not self._idle:
                raise PoolError(
                    f"No connections available in pool ({len(self._in_use)} in use)"
                )
            connection = self._idle.pop()
            self._in_use.append(connection)
            return connection

    def release(self, connection: Any) -> None:
        with self._lock:
            for i, c in enumerate(self._in_use):
                if c is connection:
                    del self._in_use[i]
                    break
            else:
                raise PoolError("Connection was not acquired from this pool")
            if not self._closed:
                self._idle.append(connection)
                return
        connection.close()

    def close(self) -> None:
        """Close idle connections now and in-use ones on release."""
        with self._lock:
            self._closed = True
            idle, self._idle = self._idle, []
        for connection in idle:
            connection.close()
        logger.debug("Closed pool with %d idle connection(s)", len(idle))
