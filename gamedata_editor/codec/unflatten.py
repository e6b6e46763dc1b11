"""
Unflattening of column path -> text rows back into records.

The failure policy is best effort per field: a cell that cannot be parsed
into its target type is logged and skipped, leaving the previous value in
place, and the rest of the row is still applied.
"""

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..models.fixed_array import FixedArray
from .coercion import coerce_scalar, render_value
from .paths import PathSegment, child_path, split_path
from .schema import FieldDescriptor, FieldKind, SchemaIntrospector, get_introspector

# (remaining path segments, raw cell text)
_Entry = Tuple[List[PathSegment], str]

_UNSET = object()


def _construct(record_type: type) -> Any:
    return record_type()


def _has_value(entries: List[_Entry]) -> bool:
    return any(value != "" for _, value in entries)


class Unflattener:
    """Applies a flat row of cell texts to an existing record.

    Keys are grouped by their first segment and dispatched on the field
    kind from the schema:

    - scalars are parsed in place; an empty cell leaves the field untouched
    - nested records are updated in place, constructed first if absent
    - unbounded lists are rebuilt from their indices in ascending order
    - fixed arrays keep their capacity; only the supplied slots change

    Nested records and collection elements are only created when at least
    one of their cells is non-empty, so blank columns contributed by other
    rows of the same table never materialize empty substructures.
    """

    def __init__(
        self,
        introspector: Optional[SchemaIntrospector] = None,
        create_instance: Optional[Callable[[type], Any]] = None,
    ):
        """Initialize the unflattener.

        Args:
            introspector: Schema source, the shared introspector by default
            create_instance: Factory used to build nested records and
                collection elements (``RecordRegistry.create``). Defaults to
                calling the type without arguments.
        """
        self.introspector = introspector or get_introspector()
        self.create_instance = create_instance or _construct
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def unflatten(self, target: Any, row: Mapping[str, Any]) -> List[str]:
        """Apply a row to ``target`` in place.

        Args:
            target: Record to update
            row: Column path -> raw cell text. Non-text values, such as a
                row straight from ``flatten``, are rendered first.

        Returns:
            Column paths whose text was rejected (target left unchanged for them)
        """
        failed: List[str] = []
        entries: List[_Entry] = [
            (split_path(key), value if isinstance(value, str) else render_value(value))
            for key, value in row.items()
        ]
        self._apply(target, entries, "", failed)
        return failed

    def _apply(self, obj: Any, entries: List[_Entry], prefix: str, failed: List[str]) -> None:
        schema = self.introspector.schema_for(type(obj))

        groups: Dict[str, List[_Entry]] = {}
        for segments, value in entries:
            if not segments:
                continue
            groups.setdefault(str(segments[0]), []).append((segments[1:], value))

        for name, items in groups.items():
            path = child_path(prefix, name)
            descriptor = schema.get(name)
            if descriptor is None:
                self.logger.debug(f"Ignoring unknown column '{path}' for {type(obj).__name__}")
                continue

            if descriptor.kind == FieldKind.COLLECTION:
                self._apply_collection(obj, descriptor, items, path, failed)
            elif descriptor.kind == FieldKind.NESTED_RECORD:
                self._apply_nested(obj, descriptor, items, path, failed)
            else:
                for rest, value in items:
                    if rest:
                        self.logger.debug(f"Ignoring sub-path of scalar column '{path}'")
                        continue
                    self._set_scalar(obj, descriptor, value, path, failed)

    def _apply_nested(
        self,
        obj: Any,
        descriptor: FieldDescriptor,
        items: List[_Entry],
        path: str,
        failed: List[str],
    ) -> None:
        sub_entries = [(rest, value) for rest, value in items if rest]
        if not _has_value(sub_entries):
            return

        child = getattr(obj, descriptor.attr, None)
        if child is None:
            child = self.create_instance(descriptor.python_type)
            setattr(obj, descriptor.attr, child)
        self._apply(child, sub_entries, path, failed)

    def _apply_collection(
        self,
        obj: Any,
        descriptor: FieldDescriptor,
        items: List[_Entry],
        path: str,
        failed: List[str],
    ) -> None:
        by_index: Dict[int, List[_Entry]] = defaultdict(list)
        for rest, value in items:
            if not rest or not isinstance(rest[0], int):
                self.logger.debug(f"Ignoring non-indexed column under collection '{path}'")
                continue
            by_index[rest[0]].append((rest[1:], value))

        if not any(_has_value(group) for group in by_index.values()):
            return

        current = getattr(obj, descriptor.attr, None)

        if descriptor.is_fixed_array:
            if not isinstance(current, FixedArray):
                element_type = (
                    descriptor.python_type
                    if descriptor.element_kind == FieldKind.PRIMITIVE
                    else None
                )
                current = FixedArray.from_list(
                    current or [], descriptor.capacity or 0, element_type
                )
                setattr(obj, descriptor.attr, current)

            for index in sorted(by_index):
                element_path = child_path(path, index)
                if index >= len(current):
                    self.logger.debug(
                        f"Ignoring '{element_path}': beyond capacity {len(current)}"
                    )
                    continue
                element = self._build_element(descriptor, by_index[index], element_path, failed)
                if element is not _UNSET:
                    current[index] = element
            return

        rebuilt: List[Any] = []
        for index in sorted(by_index):
            element = self._build_element(
                descriptor, by_index[index], child_path(path, index), failed
            )
            if element is not _UNSET:
                rebuilt.append(element)

        if isinstance(current, list):
            current[:] = rebuilt
        else:
            setattr(obj, descriptor.attr, rebuilt)

    def _build_element(
        self,
        descriptor: FieldDescriptor,
        entries: List[_Entry],
        path: str,
        failed: List[str],
    ) -> Any:
        """Build one collection element, or return ``_UNSET`` to skip the slot."""
        element_kind = descriptor.element_kind or FieldKind.PRIMITIVE

        if element_kind == FieldKind.NESTED_RECORD:
            sub_entries = [(rest, value) for rest, value in entries if rest]
            if not _has_value(sub_entries):
                return _UNSET
            element = self.create_instance(descriptor.python_type)
            self._apply(element, sub_entries, path, failed)
            return element

        for rest, value in entries:
            if rest or value == "":
                continue
            try:
                return coerce_scalar(element_kind, descriptor.python_type, value)
            except Exception as e:
                self.logger.debug(f"Could not convert '{value}' for '{path}': {e}")
                failed.append(path)
        return _UNSET

    def _set_scalar(
        self,
        obj: Any,
        descriptor: FieldDescriptor,
        value: str,
        path: str,
        failed: List[str],
    ) -> None:
        if value == "":
            return
        try:
            setattr(obj, descriptor.attr, coerce_scalar(descriptor.kind, descriptor.python_type, value))
        except Exception as e:
            # One bad cell must not abort the row
            self.logger.debug(f"Could not convert '{value}' for '{path}': {e}")
            failed.append(path)
