"""
Schema-aware ordering of CSV column headers.

Rows of one table may contribute different optional columns, so the export
header is the union of every row's keys. Sorting that union
lexicographically would scatter nested columns and put ``10`` before ``2``;
instead paths are compared segment by segment against the schema of the
type being traversed.
"""

import logging
from functools import cmp_to_key
from typing import Iterable, List, Optional

from .paths import PathSegment, split_path
from .schema import SchemaIntrospector, get_introspector


class HeaderComparator:
    """Total order over column paths of one record type.

    Rules, applied to the first differing segment:
    - two indices compare numerically
    - an index sorts before a name
    - two names compare by their position in the schema of the current
      traversal type; names unknown to the schema go last, alphabetically
    If one path is a prefix of the other, the shorter one sorts first.
    """

    def __init__(self, record_type: type, introspector: Optional[SchemaIntrospector] = None):
        self.record_type = record_type
        self.introspector = introspector or get_introspector()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def compare(self, left: str, right: str) -> int:
        """Return -1, 0 or 1 like a classic ``cmp`` function."""
        left_segments = split_path(left)
        right_segments = split_path(right)
        current: Optional[type] = self.record_type

        for left_segment, right_segment in zip(left_segments, right_segments):
            if left_segment == right_segment:
                if isinstance(left_segment, str):
                    current = self._descend(current, left_segment)
                continue
            return self._compare_segments(current, left_segment, right_segment)

        return _sign(len(left_segments) - len(right_segments))

    def sort(self, headers: Iterable[str]) -> List[str]:
        """Return the unique headers in schema order."""
        return sorted(set(headers), key=cmp_to_key(self.compare))

    def _descend(self, current: Optional[type], name: str) -> Optional[type]:
        """Return the type the next segment belongs to after ``name``."""
        if current is None:
            return None
        descriptor = self.introspector.schema_for(current).get(name)
        return descriptor.nested_type if descriptor else None

    def _compare_segments(
        self, current: Optional[type], left: PathSegment, right: PathSegment
    ) -> int:
        if isinstance(left, int) and isinstance(right, int):
            return _sign(left - right)
        if isinstance(left, int):
            return -1
        if isinstance(right, int):
            return 1

        schema = self.introspector.schema_for(current) if current is not None else None
        left_position = schema.position(left) if schema else None
        right_position = schema.position(right) if schema else None

        if left_position is not None and right_position is not None:
            return _sign(left_position - right_position)
        if left_position is not None:
            return -1
        if right_position is not None:
            return 1
        return _sign((left > right) - (left < right))


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def sort_headers(record_type: type, headers: Iterable[str]) -> List[str]:
    """Sort headers for a record type with the shared introspector."""
    return HeaderComparator(record_type).sort(headers)
