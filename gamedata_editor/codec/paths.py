"""
Column path helpers.

A column path locates one scalar leaf inside a record, e.g.
``BaseStats.ElementalResistances.Fire`` or ``Auras.0.Name``. Segments are
either field names or non-negative list indices.
"""

from typing import List, Union

PATH_SEPARATOR = "."

PathSegment = Union[str, int]


def split_path(path: str) -> List[PathSegment]:
    """Split a dotted column path into name and index segments.

    Example:
        >>> split_path("Auras.0.Name")
        ['Auras', 0, 'Name']
    """
    segments: List[PathSegment] = []
    for part in path.split(PATH_SEPARATOR):
        segments.append(int(part) if part.isascii() and part.isdigit() else part)
    return segments


def child_path(prefix: str, segment: PathSegment) -> str:
    """Append one segment to a (possibly empty) prefix."""
    return f"{prefix}{PATH_SEPARATOR}{segment}" if prefix else str(segment)
