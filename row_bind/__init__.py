"""row_bind - map query rows to typed objects and bind objects to query parameters."""

from __future__ import annotations

from row_bind.core.connection import BindingOptions, ConnectionConfig, ConnectionManager
from row_bind.core.engine import Engine, query_all, query_first
from row_bind.core.enums import DatabaseBackend, FieldKind
from row_bind.core.exceptions import (
    AdapterError,
    ConnectionError,  # noqa: A004
    ConversionError,
    DescriptorError,
    ExecutionError,
    MappingError,
    NoPrimaryKeyError,
    ParameterBindingError,
    PoolError,
    RowBindError,
)
from row_bind.core.params import ParameterSet, bind_parameters
from row_bind.mapping.descriptor import (
    DescriptorRegistry,
    MappableField,
    TypeDescriptor,
    get_primary_key,
    get_valid_fields,
    mappable,
    register_wrapper_type,
)
from row_bind.mapping.model import RowMapper, map_all, map_first
from row_bind.mapping.source import CursorSource, RowsSource
from row_bind.repository.base import Repository

__all__ = [
    # Connection
    "ConnectionConfig",
    "ConnectionManager",
    "BindingOptions",
    # Engine
    "Engine",
    "query_all",
    "query_first",
    # Descriptors
    "DescriptorRegistry",
    "MappableField",
    "TypeDescriptor",
    "get_valid_fields",
    "get_primary_key",
    "mappable",
    "register_wrapper_type",
    # Mapping
    "RowMapper",
    "map_all",
    "map_first",
    "CursorSource",
    "RowsSource",
    # Binding
    "ParameterSet",
    "bind_parameters",
    # Repository
    "Repository",
    # Enums
    "DatabaseBackend",
    "FieldKind",
    # Exceptions
    "RowBindError",
    "MappingError",
    "ConversionError",
    "DescriptorError",
    "NoPrimaryKeyError",
    "ExecutionError",
    "ParameterBindingError",
    "AdapterError",
    "ConnectionError",
    "PoolError",
]
