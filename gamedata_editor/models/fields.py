"""
Field declaration helpers for game data records.

Records are plain dataclasses. These helpers only attach metadata that the
schema introspector reads: the exported column name and, for fixed arrays,
the capacity.
"""

from dataclasses import MISSING, field
from typing import Any, Callable, Optional

from .fixed_array import fixed_array_factory

# Metadata keys understood by the schema introspector
COLUMN_KEY = "column"
CAPACITY_KEY = "capacity"


def column(
    name: Optional[str] = None,
    *,
    default: Any = MISSING,
    default_factory: Any = MISSING,
) -> Any:
    """Declare a record field with an explicit column name.

    Args:
        name: Column name used in CSV/JSON. Defaults to the PascalCase
            form of the attribute name.
        default: Default value.
        default_factory: Default factory for mutable values.
    """
    metadata = {COLUMN_KEY: name} if name else {}
    if default_factory is not MISSING:
        return field(default_factory=default_factory, metadata=metadata)
    return field(default=default, metadata=metadata)


def fixed_array(
    element_type: type,
    capacity: int,
    name: Optional[str] = None,
) -> Any:
    """Declare a fixed-capacity array field.

    Example:
        >>> @dataclass
        ... class Monster(BaseDataRow):
        ...     tags: FixedArray[str] = fixed_array(str, 3)
    """
    metadata: dict[str, Any] = {CAPACITY_KEY: capacity}
    if name:
        metadata[COLUMN_KEY] = name
    factory: Callable[[], Any] = fixed_array_factory(element_type, capacity)
    return field(default_factory=factory, metadata=metadata)
