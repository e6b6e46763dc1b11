"""
File loaders for the game data store.

Reads and writes one JSON array per table using orjson, and plain UTF-8
text for CSV files.
"""

import logging
from pathlib import Path
from typing import List

import orjson

from .models import JsonObject, JsonRows


class TableFileLoader:
    """Reads and writes table files."""

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.logger.debug("TableFileLoader initialized")

    def read_json_rows(self, json_file: Path) -> JsonRows:
        """Read a table file and return its objects.

        A file holding a single object is treated as a one-row table.
        Non-object entries are dropped. Read/parse errors are logged and
        yield an empty list so one broken file does not stop loading.

        Args:
            json_file: Path to the table JSON file

        Returns:
            List of decoded objects
        """
        try:
            with json_file.open("rb") as f:  # orjson works with bytes
                data = orjson.loads(f.read())
        except Exception as e:
            self.logger.error(f"Error reading JSON file {json_file}: {e}")
            return []

        objects: List[JsonObject] = data if isinstance(data, list) else [data]  # type: ignore
        rows = [obj for obj in objects if isinstance(obj, dict)]
        if len(rows) != len(objects):
            self.logger.warning(
                f"Dropped {len(objects) - len(rows)} non-object entries from {json_file}"
            )
        return rows

    def write_json_rows(self, json_file: Path, rows: JsonRows) -> None:
        """Write a table file as an indented JSON array.

        Raises:
            OSError: If the file cannot be written
        """
        json_file.parent.mkdir(parents=True, exist_ok=True)
        json_file.write_bytes(orjson.dumps(rows, option=orjson.OPT_INDENT_2))

    def read_text(self, csv_file: Path) -> str:
        """Read a UTF-8 text file, tolerating a byte order mark.

        Raises:
            OSError: If the file cannot be read
        """
        return csv_file.read_text(encoding="utf-8-sig")

    def write_text(self, csv_file: Path, content: str) -> None:
        """Write UTF-8 text without newline translation.

        Raises:
            OSError: If the file cannot be written
        """
        csv_file.parent.mkdir(parents=True, exist_ok=True)
        with csv_file.open("w", encoding="utf-8", newline="") as f:
            f.write(content)
