"""
Registry of record types, their table names and factories.

Replaces generic runtime construction of arbitrary types: every record
type that can appear in a table is registered here together with the
factory used to create fresh instances of it.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Type

from .models import BaseDataRow, Item, Monster, Quest

RecordFactory = Callable[[], Any]


def generate_table_name(type_name: str) -> str:
    """Pluralize a record type name into its table name.

    Example:
        >>> generate_table_name("Monster")
        'Monsters'
        >>> generate_table_name("Ability")
        'Abilities'
    """
    if type_name.endswith("s"):
        return type_name + "es"
    if type_name.endswith("y"):
        return type_name[:-1] + "ies"
    return type_name + "s"


class RecordRegistry:
    """Maps table names to record types and record types to factories.

    Registration order is kept and defines the order tables are loaded,
    saved and exported in.
    """

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self._tables: Dict[str, Type[BaseDataRow]] = {}
        self._factories: Dict[type, RecordFactory] = {}

    def register(
        self,
        record_type: type,
        factory: Optional[RecordFactory] = None,
        table_name: Optional[str] = None,
    ) -> str:
        """Register a record type.

        Args:
            record_type: Record class
            factory: Zero-argument factory, defaults to the class itself
            table_name: Explicit table name for table rows. Only subclasses
                of ``BaseDataRow`` get a table; other types (nested values)
                only register a factory.

        Returns:
            Table name, or empty string for nested value types
        """
        self._factories[record_type] = factory or record_type

        if not (isinstance(record_type, type) and issubclass(record_type, BaseDataRow)):
            return ""

        name = table_name or generate_table_name(record_type.__name__)
        if name in self._tables and self._tables[name] is not record_type:
            self.logger.warning(
                f"Table '{name}' re-registered: {self._tables[name].__name__} -> {record_type.__name__}"
            )
        self._tables[name] = record_type
        self.logger.debug(f"Registered table '{name}' for {record_type.__name__}")
        return name

    def create(self, record_type: type) -> Any:
        """Create a fresh instance through the registered factory.

        Unregistered types fall back to their no-argument constructor.
        """
        factory = self._factories.get(record_type)
        return factory() if factory else record_type()

    def table_names(self) -> List[str]:
        """Return table names in registration order."""
        return list(self._tables)

    def type_for_table(self, table_name: str) -> Optional[Type[BaseDataRow]]:
        return self._tables.get(table_name)

    def table_for_type(self, record_type: type) -> Optional[str]:
        for name, registered in self._tables.items():
            if registered is record_type:
                return name
        return None

    def items(self) -> List[tuple[str, Type[BaseDataRow]]]:
        """Return (table name, record type) pairs in registration order."""
        return list(self._tables.items())


def default_registry() -> RecordRegistry:
    """Registry with the built-in game data tables."""
    registry = RecordRegistry()
    for record_type in (Item, Monster, Quest):
        registry.register(record_type)
    return registry
