"""Mapping layer - type descriptors, value conversion, and row mapping."""

from __future__ import annotations

from row_bind.mapping.convert import (
    DEFAULT_CONVERTERS,
    ConversionResult,
    ConverterTable,
    default_converter_table,
)
from row_bind.mapping.descriptor import (
    DescriptorRegistry,
    MappableField,
    TypeDescriptor,
    WrapperMarker,
    default_registry,
    get_descriptor,
    get_primary_key,
    get_valid_fields,
    mappable,
    register_wrapper_type,
)
from row_bind.mapping.model import RowMapper, map_all, map_first
from row_bind.mapping.protocol import (
    CommandParameterSink,
    QueryExecutionContext,
    TabularDataSource,
)
from row_bind.mapping.source import CursorSource, RowsSource

__all__ = [
    # Descriptors
    "DescriptorRegistry",
    "MappableField",
    "TypeDescriptor",
    "WrapperMarker",
    "default_registry",
    "get_descriptor",
    "get_primary_key",
    "get_valid_fields",
    "mappable",
    "register_wrapper_type",
    # Conversion
    "ConverterTable",
    "ConversionResult",
    "DEFAULT_CONVERTERS",
    "default_converter_table",
    # Row mapping
    "RowMapper",
    "map_all",
    "map_first",
    # Protocols
    "TabularDataSource",
    "QueryExecutionContext",
    "CommandParameterSink",
    # Sources
    "CursorSource",
    "RowsSource",
]
