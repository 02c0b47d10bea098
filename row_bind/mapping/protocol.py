"""Collaborator protocols.

The mapping core consumes tabular results and produces command parameters
only through these narrow interfaces. The Engine is one implementation of
QueryExecutionContext; any object with the same shape works.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class TabularDataSource(Protocol):
    """Single-pass, single-consumer stream of rows with named columns."""

    def field_names(self) -> Sequence[str]:
        """Column names in result order. Read once by the consumer."""
        ...

    def next_row(self) -> Sequence[Any] | None:
        """Next row's values aligned with field_names(), or None when exhausted."""
        ...

    def release(self) -> None:
        """Release the underlying resource. Called exactly once by the consumer."""
        ...


@runtime_checkable
class QueryExecutionContext(Protocol):
    """Anything that can execute SQL text and hand back a tabular source."""

    def execute(self, sql: str, params: Any = None) -> TabularDataSource:
        ...


@runtime_checkable
class CommandParameterSink(Protocol):
    """Receives bound parameters one by one."""

    def add_parameter(self, name: str, value: Any) -> None:
        ...
