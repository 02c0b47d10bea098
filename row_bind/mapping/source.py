"""TabularDataSource implementations.

CursorSource adapts a DB-API cursor; RowsSource serves rows already held in
memory. Both are single-pass and tolerate repeated release() calls.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any


class CursorSource:
    """Tabular source over a DB-API cursor.

    Handles both tuple-like rows (sqlite3) and dict-like rows (psycopg
    dict_row). ``on_release`` runs after the cursor is closed, e.g. to hand
    the connection back to its pool.
    """

    def __init__(self, cursor: Any, on_release: Callable[[], None] | None = None) -> None:
        self._cursor = cursor
        self._on_release = on_release
        self._released = False
        if cursor.description is None:
            self._columns: list[str] = []
        else:
            self._columns = [desc[0] for desc in cursor.description]

    @property
    def released(self) -> bool:
        return self._released

    def field_names(self) -> list[str]:
        return list(self._columns)

    def next_row(self) -> Sequence[Any] | None:
        if self._released or not self._columns:
            return None
        row = self._cursor.fetchone()
        if row is None:
            return None
        if isinstance(row, Mapping):
            return [row[name] for name in self._columns]
        return row

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        try:
            self._cursor.close()
        finally:
            if self._on_release is not None:
                self._on_release()


class RowsSource:
    """Tabular source over in-memory rows.

    Args:
        field_names: Column names, in order.
        rows: Value sequences aligned with field_names.
    """

    def __init__(self, field_names: Sequence[str], rows: Iterable[Sequence[Any]]) -> None:
        self._field_names = list(field_names)
        self._rows = iter(rows)
        self.release_count = 0

    @classmethod
    def from_dicts(cls, rows: Sequence[Mapping[str, Any]]) -> RowsSource:
        """Build a source from dicts; columns come from the first row's keys."""
        if not rows:
            return cls([], [])
        columns = list(rows[0].keys())
        return cls(columns, ([row.get(name) for name in columns] for row in rows))

    @property
    def released(self) -> bool:
        return self.release_count > 0

    def field_names(self) -> list[str]:
        return list(self._field_names)

    def next_row(self) -> Sequence[Any] | None:
        if self.released:
            return None
        return next(self._rows, None)

    def release(self) -> None:
        self.release_count += 1
