"""
Game data records edited by the application.

Each record type is a dataclass deriving from ``BaseDataRow``. Field order
in the class body is the declaration order used for CSV columns and JSON
keys (after the identity fields ``ID``, ``Name``, ``State``).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .complex import Aura, Stats
from .fields import column, fixed_array
from .fixed_array import FixedArray
from .foreign_key import ForeignKey


class DataState(Enum):
    """Lifecycle state of a record."""

    Active = 0
    Inactive = 1
    Deprecated = 2


@dataclass
class BaseDataRow:
    """Common identity fields shared by every table row."""

    id: int = column("ID", default=0)
    name: str = ""
    state: DataState = DataState.Active

    @property
    def composite_display_name(self) -> str:
        """Display label used in row pickers (not exported)."""
        return f"{self.id} - {self.name}"


@dataclass
class Item(BaseDataRow):
    value: Optional[int] = None
    description: Optional[str] = None
    damage: Optional[int] = None
    type: Optional[str] = None


@dataclass
class Monster(BaseDataRow):
    hp: int = column("HP", default=0)
    attack: int = 0
    experience: int = 0

    base_stats: Optional[Stats] = None
    tags: FixedArray[str] = fixed_array(str, 3)
    auras: FixedArray[Aura] = fixed_array(Aura, 8)


@dataclass
class Quest(BaseDataRow):
    title: Optional[str] = None
    required_level: Optional[int] = None
    giver_npc: ForeignKey[Monster] = column("GiverNPC", default_factory=ForeignKey)
