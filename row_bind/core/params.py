"""SQL parameter binding and normalization.

bind_parameters selects, from a parameter object or mapping, only the values
whose token (marker + name, e.g. ``@user_id``) literally occurs in the query
text. The match is a plain substring test: ``@id`` also matches inside
``@identity``, so parameter names that prefix other names in the same query
are bound as well.

normalize_params converts marker-prefixed names to the driver's paramstyle,
leaving string literals and PostgreSQL ``::typecast`` syntax untouched.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from functools import lru_cache
from typing import Any

from row_bind.core.exceptions import DescriptorError
from row_bind.mapping.descriptor import DescriptorRegistry, default_registry
from row_bind.mapping.protocol import CommandParameterSink

logger = logging.getLogger(__name__)

DEFAULT_MARKER = "@"

# Matches single-quoted string literals (with escaped quotes handled)
_STRING_LITERAL_PATTERN = re.compile(r"'(?:[^'\\]|\\.)*'")


class ParameterSet(Mapping[str, Any]):
    """Ordered name -> value mapping of bound parameters.

    Names are stored without the marker; ``token(name)`` gives the form that
    appears in the query text. ``None`` values stand for database NULL.
    """

    def __init__(self, marker: str = DEFAULT_MARKER) -> None:
        self._marker = marker
        self._values: dict[str, Any] = {}

    @property
    def marker(self) -> str:
        return self._marker

    def add_parameter(self, name: str, value: Any) -> None:
        self._values[name] = value

    def token(self, name: str) -> str:
        return self._marker + name

    @property
    def tokens(self) -> list[str]:
        return [self.token(name) for name in self._values]

    def as_dict(self) -> dict[str, Any]:
        return dict(self._values)

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        items = ", ".join(f"{self.token(k)}={v!r}" for k, v in self._values.items())
        return f"ParameterSet({items})"


def to_parameter_map(
    params: Any,
    registry: DescriptorRegistry | None = None,
) -> Mapping[str, Any]:
    """Normalize params to a name -> value mapping.

    * ``None`` -> empty mapping.
    * Any ``Mapping`` -> returned as-is.
    * An object whose class declares fields -> its valid fields and current values.
    * Any other object (``SimpleNamespace``, attributes set in ``__init__``) ->
      its public instance attributes, skipping interface and wrapper values.

    Raises:
        DescriptorError: If an object without declared fields has no public
            attributes to bind.
    """
    if params is None:
        return {}
    if isinstance(params, Mapping):
        return params
    reg = registry if registry is not None else default_registry
    descriptor = reg.get(type(params))
    if descriptor.fields:
        return {f.name: getattr(params, f.name, None) for f in descriptor.valid_fields()}
    return _instance_attributes(params, reg)


def _instance_attributes(params: Any, registry: DescriptorRegistry) -> dict[str, Any]:
    owner = type(params).__name__
    try:
        attributes = vars(params)
    except TypeError:
        raise DescriptorError(f"{owner} declares no fields and has no attributes to bind") from None
    values = {
        name: value
        for name, value in attributes.items()
        if not name.startswith("_") and not registry.is_excluded_type(type(value))
    }
    if not values:
        raise DescriptorError(f"{owner} declares no fields and has no attributes to bind")
    logger.debug("Binding public attributes of %s: %s", owner, list(values))
    return values


def bind_parameters(
    sql: str,
    params: Any,
    sink: CommandParameterSink | None = None,
    *,
    marker: str = DEFAULT_MARKER,
    registry: DescriptorRegistry | None = None,
) -> Any:
    """Add to sink every parameter whose token occurs in sql.

    Args:
        sql: Query text searched for ``marker + name`` tokens.
        params: None, a mapping, or an object projected through its descriptor.
        sink: Receives ``add_parameter(name, value)`` calls. A new
            ParameterSet is created when omitted.
        marker: Parameter marker prefix.
        registry: Descriptor registry used for object projection.

    Returns:
        The sink.
    """
    target: Any = sink if sink is not None else ParameterSet(marker)
    for name, value in to_parameter_map(params, registry).items():
        token = marker + name
        if token in sql:
            target.add_parameter(name, value)
        else:
            logger.debug("Parameter %s not referenced by query; omitted", token)
    return target


def normalize_params(sql: str, paramstyle: str, marker: str = DEFAULT_MARKER) -> str:
    """Convert marker-prefixed parameters to the target param style.

    Args:
        sql: SQL string with ``marker + name`` parameters.
        paramstyle: Target style - 'named' (:name) or 'pyformat' (%(name)s).
        marker: The marker used in sql.

    Returns:
        SQL with parameters converted to the target style.
    """
    if paramstyle == "named":
        if marker == ":":
            return sql
        return _convert(sql, marker, r":\1")
    return _convert(sql, marker, r"%(\1)s")


@lru_cache(maxsize=32)
def _param_pattern(marker: str) -> re.Pattern[str]:
    # Negative lookbehind for the marker (handles ::typecast and @@globals)
    # and for \w (handles mid-word markers such as e-mail addresses)
    m = re.escape(marker)
    return re.compile(rf"(?<![{m}\w]){m}([a-zA-Z_]\w*)")


@lru_cache(maxsize=256)
def _convert(sql: str, marker: str, replacement: str) -> str:
    """Rewrite params, preserving string literals."""
    pattern = _param_pattern(marker)
    parts: list[str] = []
    last_end = 0

    for match in _STRING_LITERAL_PATTERN.finditer(sql):
        start, end = match.span()
        if start > last_end:
            parts.append(pattern.sub(replacement, sql[last_end:start]))
        parts.append(match.group())
        last_end = end

    if last_end < len(sql):
        parts.append(pattern.sub(replacement, sql[last_end:]))

    return "".join(parts)
