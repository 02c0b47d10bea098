"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from row_bind.core.connection import ConnectionConfig
from row_bind.core.engine import Engine
from row_bind.mapping.descriptor import DescriptorRegistry


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    """SQLite in-memory connection config with a single pooled connection."""
    return ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1)


@pytest.fixture
def registry() -> DescriptorRegistry:
    """Fresh descriptor registry, isolated from the process-wide default."""
    return DescriptorRegistry()


@pytest.fixture
def engine(sqlite_config: ConnectionConfig) -> Iterator[Engine]:
    """Engine over an in-memory database with a small people table.

    A single pooled connection means any leaked source would make the next
    query fail with PoolError.
    """
    eng = Engine.from_config(sqlite_config)
    eng.run(
        "CREATE TABLE people (id INTEGER PRIMARY KEY, name TEXT, age INTEGER, born TEXT)"
    )
    eng.run(
        "INSERT INTO people (id, name, age, born) VALUES "
        "(1, 'Alice', 30, '1994-03-01'), (2, 'Bob', NULL, NULL), (3, 'Carol', 41, '1983-11-20')"
    )
    yield eng
    eng.close()
