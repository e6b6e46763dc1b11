"""
Main service for working with game data tables.

Provides high-level API for loading and saving the JSON record store,
exchanging tables with CSV folders and editing rows while keeping
foreign key references consistent.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING

from ..codec import CsvImportResult, CsvService, FieldKind
from ..codec.schema import FieldDescriptor, SchemaIntrospector, get_introspector
from ..models import BaseDataRow, DataState, FixedArray, ForeignKey, GameDataTable
from ..registry import RecordRegistry, default_registry
from .converters import RecordJsonConverter
from .loaders import TableFileLoader
from .managers import TablesManager
from .models import COPY_SUFFIX, CSV_SUFFIX, JSON_SUFFIX, NEW_ROW_NAME, JsonRows, RecordFormatError

if TYPE_CHECKING:
    from ..settings import AppSettings


class GameDataService:
    """Service for working with game data tables.

    Owns one table per registered record type. Tables are loaded from and
    saved to a folder of ``<TableName>.json`` files, and exported to or
    imported from a folder of ``<TableName>.csv`` files through
    ``CsvService``. Row edits (add, copy, delete, ID change) keep tables
    sorted by ID.
    """

    def __init__(
        self,
        registry: Optional[RecordRegistry] = None,
        settings: Optional["AppSettings"] = None,
        introspector: Optional[SchemaIntrospector] = None,
    ):
        """Initialize the service with empty tables.

        Args:
            registry: Record types and factories, the built-in tables by default
            settings: App settings providing default data/CSV folders
            introspector: Schema source, the shared introspector by default
        """
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.registry = registry or default_registry()
        self.settings = settings
        self.introspector = introspector or get_introspector()

        # Initialize components
        self.loader = TableFileLoader()
        self.manager = TablesManager()
        self.converter = RecordJsonConverter(self.introspector, self.registry.create)
        self.csv = CsvService(self.registry, self.introspector)

        self._reset_tables()
        self.logger.info(
            f"GameDataService initialized with tables: {', '.join(self.registry.table_names())}"
        )

    def _reset_tables(self) -> None:
        self.manager.clear()
        for name, record_type in self.registry.items():
            self.manager.set_table(GameDataTable(name, record_type))

    # === ACCESS ===

    @property
    def tables(self) -> List[GameDataTable[Any]]:
        """All tables in registration order."""
        return list(self.manager)

    def get_table(self, name: str) -> Optional[GameDataTable[Any]]:
        """Return the table with the given name."""
        return self.manager.get_table(name)

    def get_table_for_type(self, record_type: type) -> Optional[GameDataTable[Any]]:
        """Return the table storing rows of ``record_type``."""
        return self.manager.get_table_for_type(record_type)

    def _resolve_folder(self, folder: Optional[str | Path], kind: str) -> Path:
        if folder is not None:
            return Path(folder)

        configured: Optional[Path] = None
        if self.settings is not None:
            if kind == "data":
                configured = self.settings.paths.data_folder_path
            else:
                configured = self.settings.paths.csv_folder_path
        if configured is None:
            raise ValueError(f"No {kind} folder given and none configured in settings")
        return configured

    # === JSON STORE ===

    def load_from_folder(self, folder: Optional[str | Path] = None) -> int:
        """Load every table from ``<TableName>.json`` files.

        Missing files leave their table empty. Unreadable files and rows
        that cannot be converted are logged and skipped.

        Args:
            folder: Data folder, the configured one by default

        Returns:
            Total number of rows loaded
        """
        data_folder = self._resolve_folder(folder, "data")
        self.logger.info(f"Loading game data from {data_folder}")
        self._reset_tables()

        files: Dict[str, Path] = {}
        for name in self.registry.table_names():
            json_file = data_folder / f"{name}{JSON_SUFFIX}"
            if json_file.is_file():
                files[name] = json_file
            else:
                self.logger.debug(f"No data file for table '{name}' at {json_file}")

        if not files:
            self.logger.warning(f"No table files found in {data_folder}")
            return 0

        # Use ThreadPoolExecutor to read files in parallel, convert on this thread
        raw: Dict[str, JsonRows] = {}
        with ThreadPoolExecutor(max_workers=min(8, len(files))) as executor:
            future_to_table = {
                executor.submit(self.loader.read_json_rows, json_file): name
                for name, json_file in files.items()
            }
            for future in as_completed(future_to_table):
                raw[future_to_table[future]] = future.result()

        total = 0
        for name in self.registry.table_names():
            if name not in raw:
                continue
            table = self.manager.get_table(name)
            if table is None:
                continue
            for data in raw[name]:
                try:
                    table.rows.append(self.converter.from_json(table.data_type, data))
                except RecordFormatError as e:
                    self.logger.error(f"Skipping row in '{name}': {e}")
            table.sort_rows()
            total += len(table.rows)
            self.logger.debug(f"Loaded {len(table.rows)} rows into '{name}'")

        self.logger.info(f"Game data loading completed: {total} rows in {len(files)} tables")
        return total

    def save_to_folder(self, folder: Optional[str | Path] = None) -> List[Path]:
        """Write every table to ``<TableName>.json``.

        Raises:
            OSError: If a file cannot be written

        Returns:
            Paths of the written files
        """
        data_folder = self._resolve_folder(folder, "data")
        data_folder.mkdir(parents=True, exist_ok=True)

        written: List[Path] = []
        for table in self.manager:
            json_file = data_folder / f"{table.name}{JSON_SUFFIX}"
            rows = [self.converter.to_json(row) for row in table.rows]
            self.loader.write_json_rows(json_file, rows)
            written.append(json_file)

        self.logger.info(f"All data saved to {data_folder}")
        return written

    # === CSV FOLDERS ===

    def export_csv_folder(self, folder: Optional[str | Path] = None) -> List[Path]:
        """Export every non-empty table to ``<TableName>.csv``.

        Raises:
            OSError: If the folder or a file cannot be written

        Returns:
            Paths of the written files
        """
        csv_folder = self._resolve_folder(folder, "csv")
        if not csv_folder.exists():
            csv_folder.mkdir(parents=True)
            self.logger.info(f"Created CSV folder: {csv_folder}")

        written: List[Path] = []
        for table in self.manager:
            if not table.rows:
                self.logger.debug(f"Skipping empty table: {table.name}")
                continue
            csv_file = csv_folder / f"{table.name}{CSV_SUFFIX}"
            self.loader.write_text(csv_file, self.csv.generate_csv(table))
            written.append(csv_file)
            self.logger.debug(f"Exported '{table.name}' to {csv_file}")

        self.logger.info(f"Exported {len(written)} tables to {csv_folder}")
        return written

    def import_csv_folder(self, folder: Optional[str | Path] = None) -> Dict[str, CsvImportResult]:
        """Update existing rows of every table from ``<TableName>.csv``.

        Tables without a CSV file are left unchanged.

        Returns:
            Import result per imported table
        """
        csv_folder = self._resolve_folder(folder, "csv")
        results: Dict[str, CsvImportResult] = {}

        for table in self.manager:
            csv_file = csv_folder / f"{table.name}{CSV_SUFFIX}"
            if not csv_file.is_file():
                self.logger.debug(f"No CSV file for table '{table.name}', skipping")
                continue
            content = self.loader.read_text(csv_file)
            results[table.name] = self.csv.update_table_from_csv(table, content)

        self.logger.info(f"Imported {len(results)} CSV files from {csv_folder}")
        return results

    def load_from_csv_folder(self, folder: Optional[str | Path] = None) -> int:
        """Rebuild every table from ``<TableName>.csv``.

        Tables without a CSV file become empty.

        Returns:
            Total number of rows loaded
        """
        csv_folder = self._resolve_folder(folder, "csv")
        self._reset_tables()

        total = 0
        for name, record_type in self.registry.items():
            csv_file = csv_folder / f"{name}{CSV_SUFFIX}"
            if not csv_file.is_file():
                self.logger.debug(f"No CSV file for table '{name}', leaving it empty")
                continue
            table = self.csv.load_table_from_csv(name, record_type, self.loader.read_text(csv_file))
            self.manager.set_table(table)
            total += len(table.rows)

        self.logger.info(f"Loaded {total} rows from CSV folder {csv_folder}")
        return total

    # === ROW OPERATIONS ===

    @staticmethod
    def _free_id(table: GameDataTable[Any], start: int) -> int:
        used = table.ids()
        candidate = max(start, 1)
        while candidate in used:
            candidate += 1
        return candidate

    def add_new_row(self, table: GameDataTable[Any]) -> BaseDataRow:
        """Append a fresh row with the lowest free ID starting at 1."""
        row: BaseDataRow = self.registry.create(table.data_type)
        row.id = self._free_id(table, 1)
        row.name = NEW_ROW_NAME
        row.state = DataState.Active
        table.insert_sorted(row)
        self.logger.info(f"Added new row {row.id} to '{table.name}'")
        return row

    def copy_row(self, table: GameDataTable[Any], row: BaseDataRow) -> BaseDataRow:
        """Duplicate ``row`` under the next free ID after it.

        The copy is deep: it is rebuilt from the flattened source so no
        nested record or array is shared with the original.
        """
        copy: BaseDataRow = self.registry.create(table.data_type)
        self.csv.unflatten(copy, self.csv.flatten(row))

        copy.id = self._free_id(table, row.id + 1)
        copy.name = f"{row.name}{COPY_SUFFIX}"
        table.insert_sorted(copy)
        self.logger.info(f"Copied row {row.id} of '{table.name}' to {copy.id}")
        return copy

    def delete_row(self, table: GameDataTable[Any], row: BaseDataRow) -> bool:
        """Remove ``row`` from ``table``; returns False if it was not there."""
        for index, existing in enumerate(table.rows):
            if existing is row:
                del table.rows[index]
                self.logger.info(f"Deleted row {row.id} from '{table.name}'")
                return True
        self.logger.warning(f"Row {row.id} not found in '{table.name}'")
        return False

    def change_row_id(self, table: GameDataTable[Any], row: BaseDataRow, new_id: int) -> int:
        """Change the ID of a row and follow it in every foreign key.

        The row is moved to its sorted position. An ID already used by
        another row of the table is rejected.

        Raises:
            ValueError: If ``new_id`` is taken by another row

        Returns:
            Number of rewritten foreign key references
        """
        old_id = row.id
        if new_id == old_id:
            return 0
        if any(other is not row and other.id == new_id for other in table.rows):
            raise ValueError(f"ID {new_id} is already used in '{table.name}'")

        table.rows.remove(row)
        row.id = new_id
        table.insert_sorted(row)
        self.logger.info(f"Changed ID of row in '{table.name}' from {old_id} to {new_id}")
        return self.update_foreign_key_references(table.data_type, old_id, new_id)

    # === REFERENCES ===

    def update_foreign_key_references(self, record_type: type, old_id: int, new_id: int) -> int:
        """Rewrite every ``ForeignKey[record_type]`` holding ``old_id``.

        Searches top-level fields, nested records and collections of every
        row in every table.

        Returns:
            Number of rewritten references
        """
        self.logger.debug(
            f"Updating references to {record_type.__name__} from ID {old_id} to {new_id}"
        )
        count = 0
        for table in self.manager:
            for row in table.rows:
                updated = self._update_references(row, record_type, old_id, new_id)
                if updated:
                    self.logger.debug(
                        f"Updated {updated} references in '{table.name}' row {row.composite_display_name}"
                    )
                count += updated

        self.logger.info(f"Updated {count} references to {record_type.__name__} {old_id} -> {new_id}")
        return count

    def _update_references(self, obj: Any, record_type: type, old_id: int, new_id: int) -> int:
        count = 0
        for descriptor in self.introspector.schema_for(type(obj)):
            value = getattr(obj, descriptor.attr, None)
            if value is None:
                continue

            if descriptor.kind == FieldKind.FOREIGN_KEY:
                if descriptor.python_type is record_type and self._key_matches(value, old_id):
                    setattr(obj, descriptor.attr, ForeignKey(id=new_id))
                    count += 1
            elif descriptor.kind == FieldKind.NESTED_RECORD:
                count += self._update_references(value, record_type, old_id, new_id)
            elif descriptor.kind == FieldKind.COLLECTION:
                for index, item in enumerate(value):
                    if item is None:
                        continue
                    if descriptor.element_kind == FieldKind.FOREIGN_KEY:
                        if descriptor.python_type is record_type and self._key_matches(item, old_id):
                            value[index] = ForeignKey(id=new_id)
                            count += 1
                    elif descriptor.element_kind == FieldKind.NESTED_RECORD:
                        count += self._update_references(item, record_type, old_id, new_id)
        return count

    @staticmethod
    def _key_matches(value: Any, record_id: int) -> bool:
        return isinstance(value, ForeignKey) and value.id == record_id

    # === FIX FIELDS ===

    def fix_fields(self) -> Tuple[int, int]:
        """Repair rows so they match the current record defaults.

        - fixed arrays whose length differs from the schema capacity are
          rebuilt with that capacity (extra slots dropped, missing padded)
        - None or empty slots of fixed arrays take the default slot value
        - None nested records whose default is set get a fresh instance

        Returns:
            (fields_fixed, arrays_fixed)
        """
        total_fields = 0
        total_arrays = 0

        for table in self.manager:
            if not table.rows:
                continue
            default_row = self.registry.create(table.data_type)
            self._initialize_slots(default_row)

            for row in table.rows:
                fields_fixed, arrays_fixed = self._fix_object(row, default_row)
                if fields_fixed or arrays_fixed:
                    self.logger.debug(
                        f"Row {row.id} of '{table.name}': fixed {fields_fixed} fields and {arrays_fixed} arrays"
                    )
                total_fields += fields_fixed
                total_arrays += arrays_fixed

        self.logger.info(f"Fix fields completed: {total_fields} fields, {total_arrays} array slots")
        return total_fields, total_arrays

    def _initialize_slots(self, obj: Any) -> None:
        """Fill empty nested-record slots of fixed arrays with fresh instances."""
        for descriptor in self.introspector.schema_for(type(obj)):
            value = getattr(obj, descriptor.attr, None)
            if value is None:
                continue
            if descriptor.kind == FieldKind.NESTED_RECORD:
                self._initialize_slots(value)
            elif descriptor.is_fixed_array and descriptor.element_kind == FieldKind.NESTED_RECORD:
                for index in range(len(value)):
                    if value[index] is None:
                        value[index] = self.registry.create(descriptor.python_type)
                    self._initialize_slots(value[index])

    def _fix_object(self, obj: Any, default_obj: Any) -> Tuple[int, int]:
        fields_fixed = 0
        arrays_fixed = 0

        for descriptor in self.introspector.schema_for(type(obj)):
            value = getattr(obj, descriptor.attr, None)
            default_value = getattr(default_obj, descriptor.attr, None)

            if descriptor.kind == FieldKind.NESTED_RECORD:
                if value is None and default_value is not None:
                    value = self.registry.create(descriptor.python_type)
                    setattr(obj, descriptor.attr, value)
                    fields_fixed += 1
                if value is not None and default_value is not None:
                    nested_fields, nested_arrays = self._fix_object(value, default_value)
                    fields_fixed += nested_fields
                    arrays_fixed += nested_arrays
            elif descriptor.is_fixed_array:
                fixed, slots = self._fix_fixed_array(obj, descriptor, value, default_value)
                fields_fixed += fixed
                arrays_fixed += slots

        return fields_fixed, arrays_fixed

    def _fix_fixed_array(
        self, obj: Any, descriptor: FieldDescriptor, value: Any, default_value: Any
    ) -> Tuple[int, int]:
        fields_fixed = 0
        slots_fixed = 0
        capacity = descriptor.capacity or 0
        element_type = (
            descriptor.python_type if descriptor.element_kind == FieldKind.PRIMITIVE else None
        )

        if not isinstance(value, FixedArray) or len(value) != capacity:
            self.logger.debug(
                f"Resizing '{descriptor.name}' from {0 if value is None else len(value)} to {capacity} slots"
            )
            value = FixedArray.from_list(value or [], capacity, element_type)
            setattr(obj, descriptor.attr, value)
            fields_fixed += 1

        for index in range(capacity):
            current = value[index]
            default_slot = default_value[index] if default_value is not None and index < len(default_value) else None
            if current is not None and current != "":
                if descriptor.element_kind == FieldKind.NESTED_RECORD and default_slot is not None:
                    nested_fields, nested_slots = self._fix_object(current, default_slot)
                    fields_fixed += nested_fields
                    slots_fixed += nested_slots
                continue
            if default_slot is None or default_slot == "":
                continue
            if descriptor.element_kind == FieldKind.NESTED_RECORD:
                value[index] = self.registry.create(descriptor.python_type)
                self._initialize_slots(value[index])
            else:
                value[index] = default_slot
            slots_fixed += 1

        return fields_fixed, slots_fixed
