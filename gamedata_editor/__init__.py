"""
gamedata_editor: Game data record editor with CSV interchange

Edits strongly-typed game records (items, monsters, quests) stored as JSON
and exchanges them with flat CSV tables for bulk editing in spreadsheets.
"""

__version__ = "0.1.0"
__author__ = "gamedata_editor Contributors"

# Core service imports
from .game_data import GameDataService
from .codec import CsvService, CsvImportResult
from .registry import RecordRegistry, default_registry
from .utils.logging_config import setup_logging

# Main data models
from .models import (
    BaseDataRow, DataState, Item, Monster, Quest,
    Stats, Resistances, Aura,
    ForeignKey, FixedArray, GameDataTable,
)

__all__ = [
    # Services
    'GameDataService',
    'CsvService',
    'CsvImportResult',
    'RecordRegistry',
    'default_registry',

    # Logging
    'setup_logging',

    # Data models
    'BaseDataRow',
    'DataState',
    'Item',
    'Monster',
    'Quest',
    'Stats',
    'Resistances',
    'Aura',
    'ForeignKey',
    'FixedArray',
    'GameDataTable',
]
