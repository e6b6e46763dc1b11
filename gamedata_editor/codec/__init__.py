"""
Schema-driven CSV codec for game data records.

Flattens nested records into ordered column path -> scalar rows for
spreadsheet editing and applies edited rows back onto the records.
"""

from .schema import (
    FieldDescriptor,
    FieldKind,
    IDENTITY_FIELDS,
    RecordSchema,
    SchemaIntrospector,
    get_introspector,
    schema_for,
)
from .paths import child_path, split_path
from .header import HeaderComparator, sort_headers
from .csv_line import decode_line, encode_line, parse_table, split_records
from .coercion import coerce_scalar, render_value
from .flatten import FlattenedRow, Flattener, flatten
from .unflatten import Unflattener
from .service import CsvImportResult, CsvService

__all__ = [
    # Schema
    "FieldDescriptor",
    "FieldKind",
    "IDENTITY_FIELDS",
    "RecordSchema",
    "SchemaIntrospector",
    "get_introspector",
    "schema_for",
    # Paths and ordering
    "child_path",
    "split_path",
    "HeaderComparator",
    "sort_headers",
    # Line codec
    "decode_line",
    "encode_line",
    "parse_table",
    "split_records",
    # Values
    "coerce_scalar",
    "render_value",
    # Flatten / unflatten
    "FlattenedRow",
    "Flattener",
    "flatten",
    "Unflattener",
    # Table level
    "CsvImportResult",
    "CsvService",
]
