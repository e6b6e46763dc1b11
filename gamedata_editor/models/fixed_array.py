"""
Fixed-capacity array used by record fields whose length is part of the schema.
"""

from collections.abc import MutableSequence
from typing import Any, Callable, Generic, Iterable, Iterator, List, Optional, TypeVar, overload

T = TypeVar("T")

# Zero values for scalar slots, everything else starts empty (None)
SCALAR_DEFAULTS: dict[type, Any] = {
    str: "",
    int: 0,
    float: 0.0,
    bool: False,
}


def slot_default(element_type: Optional[type]) -> Any:
    """Return the default value of an unset slot for the given element type."""
    if element_type is None:
        return None
    return SCALAR_DEFAULTS.get(element_type)


class FixedArray(MutableSequence[T], Generic[T]):
    """Ordered collection with a capacity fixed at construction.

    Slots are default-initialized and can be overwritten in place, but the
    array never grows or shrinks. Any operation that would change the length
    raises ``TypeError``.

    Example:
        >>> tags = FixedArray(3, str)
        >>> tags[1] = "undead"
        >>> list(tags)
        ['', 'undead', '']
    """

    def __init__(self, capacity: int, element_type: Optional[type] = None):
        if capacity < 0:
            raise ValueError(f"Invalid capacity: {capacity}, must be >= 0")
        self.element_type = element_type
        self._items: List[Any] = [slot_default(element_type) for _ in range(capacity)]

    @classmethod
    def from_list(
        cls,
        items: Iterable[Any],
        capacity: int,
        element_type: Optional[type] = None,
    ) -> "FixedArray[Any]":
        """Build an array of the given capacity, truncating or padding items."""
        array: FixedArray[Any] = cls(capacity, element_type)
        for index, item in enumerate(items):
            if index >= capacity:
                break
            array[index] = item
        return array

    @property
    def capacity(self) -> int:
        """Number of slots (same as ``len``)."""
        return len(self._items)

    def _check_index(self, index: int) -> int:
        if not isinstance(index, int):
            raise TypeError(f"FixedArray indices must be integers, not {type(index).__name__}")
        if index < 0:
            index += len(self._items)
        if index < 0 or index >= len(self._items):
            raise IndexError(f"Index {index} out of range for capacity {len(self._items)}")
        return index

    @overload
    def __getitem__(self, index: int) -> T: ...

    @overload
    def __getitem__(self, index: slice) -> List[T]: ...

    def __getitem__(self, index: Any) -> Any:
        if isinstance(index, slice):
            return self._items[index]
        return self._items[self._check_index(index)]

    def __setitem__(self, index: Any, value: Any) -> None:
        if isinstance(index, slice):
            raise TypeError("FixedArray does not support slice assignment")
        self._items[self._check_index(index)] = value

    def __delitem__(self, index: Any) -> None:
        raise TypeError("FixedArray does not support removing elements")

    def insert(self, index: int, value: Any) -> None:
        raise TypeError("FixedArray does not support inserting elements")

    def append(self, value: Any) -> None:
        raise TypeError("FixedArray does not support adding elements")

    def clear(self) -> None:
        raise TypeError("FixedArray does not support clearing; use reset() per slot")

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FixedArray):
            return self._items == other._items  # type: ignore[attr-defined]
        if isinstance(other, list):
            return self._items == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"FixedArray({self._items!r})"

    def reset(self, index: int) -> None:
        """Restore a single slot to its default value."""
        self._items[self._check_index(index)] = slot_default(self.element_type)

    def to_list(self) -> List[T]:
        """Return a plain list copy of all slots."""
        return list(self._items)


def fixed_array_factory(element_type: type, capacity: int) -> Callable[[], FixedArray[Any]]:
    """Return a zero-argument factory usable as a dataclass ``default_factory``."""

    def factory() -> FixedArray[Any]:
        return FixedArray(capacity, element_type)

    return factory
