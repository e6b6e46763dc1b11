"""
Typed foreign-key reference between game data tables.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, TYPE_CHECKING

if TYPE_CHECKING:
    from .records import BaseDataRow

T = TypeVar("T", bound="BaseDataRow")


@dataclass(eq=True)
class ForeignKey(Generic[T]):
    """Reference to a row of another table by its integer ID.

    The referenced record type only lives in the type hint
    (``ForeignKey[Monster]``); at runtime the wrapper is just an ID. It is
    always stored and exported as a bare integer, never as a nested object.

    Example:
        >>> giver: ForeignKey[Monster] = ForeignKey.of(7)
        >>> int(giver)
        7
    """

    id: int = 0

    @classmethod
    def of(cls, record_id: int) -> "ForeignKey[T]":
        """Create a reference to the given ID."""
        return cls(id=int(record_id))

    def __int__(self) -> int:
        return self.id

    def __str__(self) -> str:
        return str(self.id)
