"""
Module for working with the game data record store.

Provides services for loading and saving tables as JSON, exchanging them
with CSV folders, and editing rows while keeping foreign keys consistent.
"""

from .service import GameDataService
from .models import (
    JsonObject,
    JsonRows,
    JSON_SUFFIX,
    CSV_SUFFIX,
    NEW_ROW_NAME,
    COPY_SUFFIX,
    RecordFormatError,
)
from .managers import TablesManager
from .loaders import TableFileLoader
from .converters import RecordJsonConverter

# Public exports
__all__ = [
    # Main service
    "GameDataService",
    # Type aliases
    "JsonObject",
    "JsonRows",
    # Constants
    "JSON_SUFFIX",
    "CSV_SUFFIX",
    "NEW_ROW_NAME",
    "COPY_SUFFIX",
    # Errors
    "RecordFormatError",
    # Component classes (for advanced usage)
    "TablesManager",
    "TableFileLoader",
    "RecordJsonConverter",
]
