"""
Data models for the JSON record store.

Contains type aliases and constants shared by the game_data package.
"""

from typing import Any, Dict, List, TypeAlias

JsonObject: TypeAlias = Dict[str, Any]
"""A single record as decoded from JSON."""

JsonRows: TypeAlias = List[JsonObject]
"""Contents of one table file."""

# File name patterns inside data/CSV folders
JSON_SUFFIX = ".json"
CSV_SUFFIX = ".csv"

# Defaults for rows created in the editor
NEW_ROW_NAME = "New Item"
COPY_SUFFIX = " (Copy)"


class RecordFormatError(ValueError):
    """Raised when a stored record cannot be converted to its type."""
