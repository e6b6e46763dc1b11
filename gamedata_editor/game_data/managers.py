"""
Manager for the in-memory set of game data tables.

Provides lookup of tables by name and by record type, and of rows by ID.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional

from ..models import BaseDataRow, GameDataTable


class TablesManager:
    """Holds one ``GameDataTable`` per registered record type.

    Maintains two indices:
    - tables_by_name: table name -> table
    - tables_by_type: record type -> table
    """

    def __init__(self):
        self.tables_by_name: Dict[str, GameDataTable[Any]] = {}
        self.tables_by_type: Dict[type, GameDataTable[Any]] = {}
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.logger.debug("TablesManager initialized")

    def set_table(self, table: GameDataTable[Any]) -> None:
        """Add or replace a table (matched by name)."""
        previous = self.tables_by_name.get(table.name)
        if previous is not None and previous.data_type is not table.data_type:
            self.tables_by_type.pop(previous.data_type, None)
        self.tables_by_name[table.name] = table
        self.tables_by_type[table.data_type] = table

    def clear(self) -> None:
        self.tables_by_name.clear()
        self.tables_by_type.clear()

    def get_table(self, name: str) -> Optional[GameDataTable[Any]]:
        """Return the table with the given name."""
        return self.tables_by_name.get(name)

    def get_table_for_type(self, record_type: type) -> Optional[GameDataTable[Any]]:
        """Return the table storing ``record_type`` rows."""
        return self.tables_by_type.get(record_type)

    def get_row(self, record_type: type, row_id: int) -> Optional[BaseDataRow]:
        """Return the row of ``record_type`` with the given ID."""
        table = self.get_table_for_type(record_type)
        return table.get_row(row_id) if table else None

    def table_names(self) -> List[str]:
        """Return table names in insertion order."""
        return list(self.tables_by_name)

    def __iter__(self) -> Iterator[GameDataTable[Any]]:
        return iter(list(self.tables_by_name.values()))

    def __len__(self) -> int:
        return len(self.tables_by_name)
