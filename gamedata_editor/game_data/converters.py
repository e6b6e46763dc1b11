"""
Conversion between records and JSON objects.

Records are stored with PascalCase keys in schema order, enums by name,
foreign keys as bare integers and fixed arrays as plain JSON arrays.
Reading is lenient about key case and numeric strings.
"""

import logging
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, List, Optional, cast

from ..codec.coercion import PRIMITIVE_PARSERS
from ..codec.schema import FieldDescriptor, FieldKind, SchemaIntrospector, get_introspector
from ..models import FixedArray, ForeignKey
from .models import JsonObject, RecordFormatError


def _construct(record_type: type) -> Any:
    return record_type()


class RecordJsonConverter:
    """Schema-driven record <-> JSON object converter."""

    def __init__(
        self,
        introspector: Optional[SchemaIntrospector] = None,
        create_instance: Optional[Callable[[type], Any]] = None,
    ):
        self.introspector = introspector or get_introspector()
        self.create_instance = create_instance or _construct
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    # === WRITING ===

    def to_json(self, record: Any) -> JsonObject:
        """Convert a record to a JSON-ready dict in schema order."""
        result: JsonObject = {}
        for descriptor in self.introspector.schema_for(type(record)):
            value = getattr(record, descriptor.attr, None)
            if descriptor.kind == FieldKind.COLLECTION:
                result[descriptor.name] = (
                    None
                    if value is None
                    else [self._element_to_json(descriptor, item) for item in value]
                )
            elif descriptor.kind == FieldKind.NESTED_RECORD:
                result[descriptor.name] = None if value is None else self.to_json(value)
            else:
                result[descriptor.name] = self._scalar_to_json(descriptor.kind, value)
        return result

    def _element_to_json(self, descriptor: FieldDescriptor, item: Any) -> Any:
        if item is None:
            return None
        if descriptor.element_kind == FieldKind.NESTED_RECORD:
            return self.to_json(item)
        return self._scalar_to_json(descriptor.element_kind or FieldKind.PRIMITIVE, item)

    @staticmethod
    def _scalar_to_json(kind: FieldKind, value: Any) -> Any:
        if value is None:
            return None
        if kind == FieldKind.ENUM and isinstance(value, Enum):
            return value.name
        if kind == FieldKind.FOREIGN_KEY:
            return value.id if isinstance(value, ForeignKey) else int(value)
        if isinstance(value, Decimal):
            return str(value)
        return value

    # === READING ===

    def from_json(self, record_type: type, data: JsonObject) -> Any:
        """Create a record of ``record_type`` from a decoded JSON object.

        Keys are matched case-insensitively; missing keys keep the default.

        Raises:
            RecordFormatError: If a value has the wrong shape for its field
        """
        if not isinstance(data, dict):
            raise RecordFormatError(f"Expected an object for {record_type.__name__}, got {type(data).__name__}")

        record = self.create_instance(record_type)
        lowered = {str(key).lower(): value for key, value in data.items()}

        for descriptor in self.introspector.schema_for(record_type):
            key = descriptor.name.lower()
            if key not in lowered:
                continue
            value = lowered[key]
            try:
                setattr(record, descriptor.attr, self._field_from_json(descriptor, value))
            except RecordFormatError:
                raise
            except (ValueError, KeyError, TypeError) as e:
                raise RecordFormatError(
                    f"Invalid value for {record_type.__name__}.{descriptor.name}: {value!r} ({e})"
                ) from e
        return record

    def _field_from_json(self, descriptor: FieldDescriptor, value: Any) -> Any:
        if value is None:
            if descriptor.kind == FieldKind.COLLECTION:
                return None if descriptor.nullable else []
            return None

        if descriptor.kind == FieldKind.NESTED_RECORD:
            return self.from_json(descriptor.python_type, value)

        if descriptor.kind == FieldKind.COLLECTION:
            if not isinstance(value, list):
                raise RecordFormatError(f"Expected an array for {descriptor.name}")
            items = [self._element_from_json(descriptor, item) for item in cast(List[Any], value)]
            if descriptor.is_fixed_array:
                if len(items) != descriptor.capacity:
                    self.logger.warning(
                        f"Fixed array '{descriptor.name}' stored with {len(items)} slots, "
                        f"schema capacity is {descriptor.capacity}"
                    )
                element_type = (
                    descriptor.python_type
                    if descriptor.element_kind == FieldKind.PRIMITIVE
                    else None
                )
                return FixedArray.from_list(items, len(items), element_type)
            return items

        return self._scalar_from_json(descriptor.kind, descriptor.python_type, value)

    def _element_from_json(self, descriptor: FieldDescriptor, item: Any) -> Any:
        if item is None:
            return None
        if descriptor.element_kind == FieldKind.NESTED_RECORD:
            return self.from_json(descriptor.python_type, item)
        return self._scalar_from_json(
            descriptor.element_kind or FieldKind.PRIMITIVE, descriptor.python_type, item
        )

    @staticmethod
    def _scalar_from_json(kind: FieldKind, python_type: Any, value: Any) -> Any:
        if kind == FieldKind.ENUM:
            if isinstance(value, str):
                return python_type[value]
            return python_type(value)

        if kind == FieldKind.FOREIGN_KEY:
            if isinstance(value, bool) or not isinstance(value, (int, str)):
                raise RecordFormatError(f"Expected a number for a foreign key, got {value!r}")
            return ForeignKey(id=int(value))

        # Numbers may be stored as strings
        if isinstance(value, str) and python_type is not str:
            parser = PRIMITIVE_PARSERS.get(python_type)
            return parser(value) if parser else value

        if python_type is float and isinstance(value, int) and not isinstance(value, bool):
            return float(value)
        if python_type is Decimal:
            return Decimal(str(value))
        return value
