"""
Table-level CSV export and import.

Export: schema -> flatten every row -> unify and order headers -> encode.
Import: parse lines -> match rows by ``ID`` -> unflatten into the record.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Set

from ..models import BaseDataRow, GameDataTable
from ..registry import RecordRegistry, default_registry
from .coercion import parse_int, render_value
from .csv_line import encode_line, parse_table
from .flatten import FlattenedRow, Flattener
from .header import HeaderComparator
from .paths import child_path
from .schema import FieldKind, SchemaIntrospector, get_introspector
from .unflatten import Unflattener

ID_COLUMN = "ID"
LINE_TERMINATOR = "\n"


@dataclass
class CsvImportResult:
    """Outcome of importing CSV text into a table."""

    updated: int = 0
    skipped: int = 0
    failed_fields: List[str] = field(default_factory=list)


class CsvService:
    """Converts game data tables to and from CSV text.

    The service only deals with text; reading and writing files is left to
    ``GameDataService``.
    """

    def __init__(
        self,
        registry: Optional[RecordRegistry] = None,
        introspector: Optional[SchemaIntrospector] = None,
    ):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.introspector = introspector or get_introspector()
        self.registry = registry or default_registry()
        self.flattener = Flattener(self.introspector)
        self.unflattener = Unflattener(self.introspector, self.registry.create)

    # === RECORD LEVEL ===

    def flatten(self, record: Any) -> FlattenedRow:
        """Flatten one record into column path -> scalar."""
        return self.flattener.flatten(record)

    def unflatten(self, record: Any, row: Mapping[str, Any]) -> List[str]:
        """Apply a column path -> text row to a record; returns rejected paths."""
        return self.unflattener.unflatten(record, row)

    def header_for(self, record_type: type) -> List[str]:
        """Return every column the schema of ``record_type`` defines statically.

        Unbounded lists contribute no columns here; their indices only show
        up once rows are flattened.
        """
        columns: List[str] = []
        self._collect_columns(record_type, "", columns, set())
        return HeaderComparator(record_type, self.introspector).sort(columns)

    def _collect_columns(
        self, record_type: type, prefix: str, columns: List[str], visiting: Set[type]
    ) -> None:
        if record_type in visiting:
            return
        visiting.add(record_type)

        for descriptor in self.introspector.schema_for(record_type):
            key = child_path(prefix, descriptor.name)
            if descriptor.kind == FieldKind.NESTED_RECORD:
                self._collect_columns(descriptor.python_type, key, columns, visiting)
            elif descriptor.kind == FieldKind.COLLECTION:
                for index in range(descriptor.capacity or 0):
                    element_key = child_path(key, index)
                    if descriptor.element_kind == FieldKind.NESTED_RECORD:
                        self._collect_columns(
                            descriptor.python_type, element_key, columns, visiting
                        )
                    else:
                        columns.append(element_key)
            else:
                columns.append(key)

        visiting.discard(record_type)

    # === EXPORT ===

    def generate_csv(self, table: GameDataTable[Any]) -> str:
        """Render a table as CSV text; empty string for a table without rows."""
        if not table.rows:
            return ""

        rows = self.flattener.flatten_all(table.rows)
        seen: Set[str] = set(self.header_for(table.data_type))
        for row in rows:
            seen.update(row.keys())
        headers = HeaderComparator(table.data_type, self.introspector).sort(seen)

        lines = [encode_line(headers)]
        for row in rows:
            lines.append(encode_line(render_value(row.get(header)) for header in headers))

        self.logger.debug(
            f"Generated CSV for '{table.name}': {len(rows)} rows, {len(headers)} columns"
        )
        return LINE_TERMINATOR.join(lines) + LINE_TERMINATOR

    # === IMPORT ===

    def parse_csv(self, content: str) -> List[Dict[str, str]]:
        """Parse CSV text into header-keyed rows (positional association)."""
        _, rows = parse_table(content)
        return rows

    def _row_id(self, record: Mapping[str, str]) -> Optional[int]:
        try:
            return parse_int(record.get(ID_COLUMN, ""))
        except ValueError:
            return None

    def update_table_from_csv(self, table: GameDataTable[Any], content: str) -> CsvImportResult:
        """Update existing rows of ``table`` from CSV text.

        Rows are matched by ``ID``. Records without a parseable ID, or with
        an ID the table does not contain, are skipped. Rows are never added
        or removed.
        """
        result = CsvImportResult()
        records = self.parse_csv(content)
        rows_by_id: Dict[int, BaseDataRow] = {row.id: row for row in table.rows}

        for record in records:
            row_id = self._row_id(record)
            if row_id is None:
                self.logger.debug(f"Skipping CSV row without valid ID: {record.get(ID_COLUMN)!r}")
                result.skipped += 1
                continue

            row = rows_by_id.get(row_id)
            if row is None:
                self.logger.debug(f"Skipping CSV row with unknown ID {row_id} in '{table.name}'")
                result.skipped += 1
                continue

            failed = self.unflattener.unflatten(row, record)
            result.failed_fields.extend(f"{row_id}:{path}" for path in failed)
            result.updated += 1

        self.logger.info(
            f"Imported CSV into '{table.name}': {result.updated} updated, "
            f"{result.skipped} skipped, {len(result.failed_fields)} rejected cells"
        )
        return result

    def load_table_from_csv(self, name: str, record_type: type, content: str) -> GameDataTable[Any]:
        """Build a new table from CSV text, one record per row with a valid ID."""
        table: GameDataTable[Any] = GameDataTable(name, record_type)

        for record in self.parse_csv(content):
            row_id = self._row_id(record)
            if row_id is None:
                self.logger.debug(f"Skipping CSV row without valid ID: {record.get(ID_COLUMN)!r}")
                continue
            row = self.registry.create(record_type)
            row.id = row_id
            self.unflattener.unflatten(row, record)
            table.rows.append(row)

        table.sort_rows()
        self.logger.info(f"Loaded {len(table.rows)} rows for '{name}' from CSV")
        return table
