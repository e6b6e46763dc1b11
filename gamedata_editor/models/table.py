"""
In-memory table of game data records.
"""

from dataclasses import dataclass, field
from typing import Generic, List, Optional, Type, TypeVar

from .records import BaseDataRow

R = TypeVar("R", bound=BaseDataRow)


@dataclass
class GameDataTable(Generic[R]):
    """All rows of one record type.

    Attributes:
        name: Table name, also the base name of its JSON/CSV files
        data_type: Record class stored in this table
        rows: Records, kept sorted by ID by the service layer
    """

    name: str
    data_type: Type[R]
    rows: List[R] = field(default_factory=list)

    def get_row(self, row_id: int) -> Optional[R]:
        """Return the row with the given ID, or None."""
        for row in self.rows:
            if row.id == row_id:
                return row
        return None

    def ids(self) -> set[int]:
        """Return the set of IDs currently in use."""
        return {row.id for row in self.rows}

    def sort_rows(self) -> None:
        """Sort rows by ID in place."""
        self.rows.sort(key=lambda row: row.id)

    def insert_sorted(self, row: R) -> int:
        """Insert a row keeping ID order; returns the insert index."""
        index = 0
        for existing in self.rows:
            if existing.id > row.id:
                break
            index += 1
        self.rows.insert(index, row)
        return index

    def __len__(self) -> int:
        return len(self.rows)
