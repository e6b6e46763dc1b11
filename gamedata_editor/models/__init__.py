"""
Data models for game data records.

Records are dataclasses; nested values, typed foreign keys and fixed-capacity
arrays are expressed through type hints and field metadata so the codec can
derive a schema from the class alone.
"""

from .complex import Aura, Resistances, Stats
from .fields import CAPACITY_KEY, COLUMN_KEY, column, fixed_array
from .fixed_array import FixedArray, slot_default
from .foreign_key import ForeignKey
from .records import BaseDataRow, DataState, Item, Monster, Quest
from .table import GameDataTable

__all__ = [
    # Base and domain records
    "BaseDataRow",
    "DataState",
    "Item",
    "Monster",
    "Quest",
    # Nested value types
    "Aura",
    "Resistances",
    "Stats",
    # Field wrappers
    "ForeignKey",
    "FixedArray",
    "slot_default",
    # Declaration helpers
    "column",
    "fixed_array",
    "COLUMN_KEY",
    "CAPACITY_KEY",
    # Tables
    "GameDataTable",
]
