"""
Nested value types embedded in game data records.
"""

from dataclasses import dataclass, field


@dataclass
class Resistances:
    """Elemental resistance values."""

    fire: int = 0
    ice: int = 0
    lightning: int = 0
    poison: int = 0


@dataclass
class Stats:
    """Base attributes of a creature."""

    strength: int = 0
    dexterity: int = 0
    intelligence: int = 0
    elemental_resistances: Resistances = field(default_factory=Resistances)


@dataclass
class Aura:
    """Periodic effect emitted by a monster."""

    name: str = ""
    damage: int = 0
    duration: float = 0.0
