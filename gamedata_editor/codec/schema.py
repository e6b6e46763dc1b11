"""
Schema introspection for game data records.

Derives, once per record type, the ordered list of fields and their kind.
Every other part of the codec dispatches on ``FieldKind`` instead of
inspecting runtime values, so supporting a new field shape only means
teaching ``_classify`` about it.
"""

import dataclasses
import logging
import types
from collections.abc import MutableSequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union, get_args, get_origin, get_type_hints

from ..models.fields import CAPACITY_KEY, COLUMN_KEY
from ..models.fixed_array import FixedArray
from ..models.foreign_key import ForeignKey

logger = logging.getLogger(__name__)

# Identity fields always lead, in this order, ahead of declaration order
IDENTITY_FIELDS: Tuple[str, ...] = ("ID", "Name", "State")

PRIMITIVE_TYPES: Tuple[type, ...] = (bool, int, float, str, Decimal)


class FieldKind(Enum):
    """Closed set of field shapes the codec knows how to walk."""

    PRIMITIVE = "primitive"
    NULLABLE_PRIMITIVE = "nullable_primitive"
    ENUM = "enum"
    FOREIGN_KEY = "foreign_key"
    NESTED_RECORD = "nested_record"
    COLLECTION = "collection"

    @property
    def is_scalar(self) -> bool:
        """True for kinds that map to exactly one column."""
        return self not in (FieldKind.NESTED_RECORD, FieldKind.COLLECTION)


@dataclass(frozen=True)
class FieldDescriptor:
    """Description of one record field.

    Attributes:
        name: Column name (``BaseStats``, ``GiverNPC``)
        attr: Python attribute name (``base_stats``, ``giver_npc``)
        kind: Field kind
        python_type: Declared type with Optional unwrapped. Record class for
            NESTED_RECORD, enum class for ENUM, referenced record class for
            FOREIGN_KEY (may be None), element type for COLLECTION.
        nullable: Whether None is a legal value
        element_kind: Kind of the elements for COLLECTION fields
        capacity: Slot count of a fixed array, None for unbounded lists
    """

    name: str
    attr: str
    kind: FieldKind
    python_type: Any = None
    nullable: bool = False
    element_kind: Optional[FieldKind] = None
    capacity: Optional[int] = None

    @property
    def is_fixed_array(self) -> bool:
        return self.kind == FieldKind.COLLECTION and self.capacity is not None

    @property
    def nested_type(self) -> Optional[type]:
        """Record type the path descends into after this field, if any."""
        if self.kind == FieldKind.NESTED_RECORD:
            return self.python_type
        if self.kind == FieldKind.COLLECTION and self.element_kind == FieldKind.NESTED_RECORD:
            return self.python_type
        return None


@dataclass(frozen=True)
class RecordSchema:
    """Ordered field list of one record type."""

    record_type: type
    fields: Tuple[FieldDescriptor, ...]
    _index: Dict[str, int] = dataclasses.field(
        init=False, repr=False, compare=False, hash=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        self._index.update(
            {descriptor.name: position for position, descriptor in enumerate(self.fields)}
        )

    def get(self, name: str) -> Optional[FieldDescriptor]:
        """Return the descriptor for a column name, or None."""
        position = self._index.get(name)
        return None if position is None else self.fields[position]

    def position(self, name: str) -> Optional[int]:
        """Return the position of a column name in schema order, or None."""
        return self._index.get(name)

    def names(self) -> List[str]:
        """Return column names in schema order."""
        return [descriptor.name for descriptor in self.fields]

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)


def pascal_case(attr: str) -> str:
    """Convert a snake_case attribute name to a PascalCase column name."""
    return "".join(part[:1].upper() + part[1:] for part in attr.split("_") if part)


def _unwrap_optional(hint: Any) -> Tuple[Any, bool]:
    """Strip ``Optional[...]`` and report whether it was present."""
    origin = get_origin(hint)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in get_args(hint) if arg is not type(None)]
        if len(args) == 1 and len(args) != len(get_args(hint)):
            return args[0], True
    return hint, False


def _is_record_type(hint: Any) -> bool:
    return isinstance(hint, type) and dataclasses.is_dataclass(hint)


def _classify_element(hint: Any) -> Tuple[FieldKind, Any]:
    """Classify a collection element type (no nested collections)."""
    hint, _ = _unwrap_optional(hint)
    origin = get_origin(hint)
    if hint is ForeignKey or origin is ForeignKey:
        args = get_args(hint)
        return FieldKind.FOREIGN_KEY, args[0] if args else None
    if isinstance(hint, type) and issubclass(hint, Enum):
        return FieldKind.ENUM, hint
    if _is_record_type(hint):
        return FieldKind.NESTED_RECORD, hint
    if hint not in PRIMITIVE_TYPES:
        logger.debug(f"Unsupported collection element type {hint!r}, treating as opaque scalar")
    return FieldKind.PRIMITIVE, hint


def _classify(hint: Any, metadata: Any) -> Dict[str, Any]:
    """Map a declared type to FieldDescriptor keyword arguments."""
    hint, nullable = _unwrap_optional(hint)
    origin = get_origin(hint)
    args = get_args(hint)

    if hint is ForeignKey or origin is ForeignKey:
        return {
            "kind": FieldKind.FOREIGN_KEY,
            "python_type": args[0] if args else None,
            "nullable": nullable,
        }

    if hint is FixedArray or origin is FixedArray:
        element_kind, element_type = _classify_element(args[0] if args else str)
        return {
            "kind": FieldKind.COLLECTION,
            "python_type": element_type,
            "nullable": nullable,
            "element_kind": element_kind,
            "capacity": int(metadata.get(CAPACITY_KEY, 0)),
        }

    list_origin = origin if origin is not None else hint
    if (
        isinstance(list_origin, type)
        and issubclass(list_origin, MutableSequence)
        and not issubclass(list_origin, (str, bytes))
    ):
        element_kind, element_type = _classify_element(args[0] if args else str)
        return {
            "kind": FieldKind.COLLECTION,
            "python_type": element_type,
            "nullable": nullable,
            "element_kind": element_kind,
        }

    if isinstance(hint, type) and issubclass(hint, Enum):
        return {"kind": FieldKind.ENUM, "python_type": hint, "nullable": nullable}

    if _is_record_type(hint):
        return {"kind": FieldKind.NESTED_RECORD, "python_type": hint, "nullable": nullable}

    if hint not in PRIMITIVE_TYPES:
        # Unknown shapes degrade to an opaque scalar rather than failing
        logger.debug(f"Unsupported field type {hint!r}, treating as opaque scalar")

    kind = FieldKind.NULLABLE_PRIMITIVE if nullable else FieldKind.PRIMITIVE
    return {"kind": kind, "python_type": hint, "nullable": nullable}


class SchemaIntrospector:
    """Builds and caches ``RecordSchema`` objects per record type.

    Schemas are immutable, so a computed schema is reused for the lifetime
    of the process. The cache is only written from the single thread that
    drives the editor.
    """

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self._cache: Dict[type, RecordSchema] = {}

    def schema_for(self, record_type: type) -> RecordSchema:
        """Return the ordered schema of a record type.

        Non-dataclass types yield an empty schema.
        """
        schema = self._cache.get(record_type)
        if schema is None:
            schema = self._build(record_type)
            self._cache[record_type] = schema
        return schema

    def field_names(self, record_type: type) -> List[str]:
        """Column names in display/export order."""
        return self.schema_for(record_type).names()

    def clear_cache(self) -> None:
        self._cache.clear()

    def _build(self, record_type: type) -> RecordSchema:
        if not _is_record_type(record_type):
            self.logger.debug(f"{record_type!r} is not a record type, empty schema")
            return RecordSchema(record_type, ())

        try:
            hints = get_type_hints(record_type)
        except Exception as e:
            self.logger.debug(f"Could not resolve type hints of {record_type.__name__}: {e}")
            hints = {}

        declared: List[FieldDescriptor] = []
        for dc_field in dataclasses.fields(record_type):
            if dc_field.name.startswith("_"):
                continue
            hint = hints.get(dc_field.name, dc_field.type)
            name = dc_field.metadata.get(COLUMN_KEY) or pascal_case(dc_field.name)
            declared.append(
                FieldDescriptor(name=name, attr=dc_field.name, **_classify(hint, dc_field.metadata))
            )

        ordered = sorted(
            enumerate(declared),
            key=lambda item: (
                IDENTITY_FIELDS.index(item[1].name)
                if item[1].name in IDENTITY_FIELDS
                else len(IDENTITY_FIELDS),
                item[0],
            ),
        )
        schema = RecordSchema(record_type, tuple(descriptor for _, descriptor in ordered))
        self.logger.debug(f"Schema for {record_type.__name__}: {schema.names()}")
        return schema


# Shared introspector for the process
_default_introspector = SchemaIntrospector()


def get_introspector() -> SchemaIntrospector:
    """Return the process-wide schema introspector."""
    return _default_introspector


def schema_for(record_type: type) -> RecordSchema:
    """Shortcut for ``get_introspector().schema_for(record_type)``."""
    return _default_introspector.schema_for(record_type)
