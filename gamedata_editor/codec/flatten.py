"""
Flattening of nested records into column path -> scalar rows.
"""

import logging
from typing import Any, Dict, Iterable, Optional

from .coercion import scalar_value
from .paths import child_path
from .schema import FieldDescriptor, FieldKind, SchemaIntrospector, get_introspector

FlattenedRow = Dict[str, Any]
"""Ordered mapping of column path to scalar value for one record."""


class Flattener:
    """Walks a record in schema order and emits its scalar leaves.

    - scalars, enums (by name) and foreign keys (by ID) emit one column
    - nested records recurse with the field name as prefix
    - collections emit one column, or one nested group, per occupied index
    - fields and slots holding None are skipped entirely

    Because None fields emit nothing, rows of the same table can carry
    different column sets; ``HeaderComparator`` unifies them on export.
    The input record is never modified.
    """

    def __init__(self, introspector: Optional[SchemaIntrospector] = None):
        self.introspector = introspector or get_introspector()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def flatten(self, record: Any) -> FlattenedRow:
        """Flatten one record."""
        row: FlattenedRow = {}
        self._flatten_into(record, "", row)
        return row

    def flatten_all(self, records: Iterable[Any]) -> list[FlattenedRow]:
        """Flatten records in order."""
        return [self.flatten(record) for record in records]

    def _flatten_into(self, obj: Any, prefix: str, row: FlattenedRow) -> None:
        schema = self.introspector.schema_for(type(obj))
        for descriptor in schema:
            value = getattr(obj, descriptor.attr, None)
            if value is None:
                continue

            key = child_path(prefix, descriptor.name)
            if descriptor.kind == FieldKind.COLLECTION:
                self._flatten_collection(descriptor, value, key, row)
            elif descriptor.kind == FieldKind.NESTED_RECORD:
                self._flatten_into(value, key, row)
            else:
                row[key] = scalar_value(descriptor.kind, value)

    def _flatten_collection(
        self, descriptor: FieldDescriptor, items: Iterable[Any], key: str, row: FlattenedRow
    ) -> None:
        element_kind = descriptor.element_kind or FieldKind.PRIMITIVE
        for index, item in enumerate(items):
            if item is None:
                continue
            item_key = child_path(key, index)
            if element_kind == FieldKind.NESTED_RECORD:
                self._flatten_into(item, item_key, row)
            else:
                row[item_key] = scalar_value(element_kind, item)


def flatten(record: Any) -> FlattenedRow:
    """Flatten a record with the shared introspector."""
    return Flattener().flatten(record)
