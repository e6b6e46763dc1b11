"""Shared pytest fixtures."""

import logging
from pathlib import Path
from typing import Iterator

import pytest
from PySide6.QtCore import QSettings

from gamedata_editor.models import Aura, DataState, ForeignKey, Item, Monster, Quest, Resistances, Stats
from gamedata_editor.registry import RecordRegistry, default_registry


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path) -> Iterator[Path]:
    """Store QSettings in a temporary INI location for every test."""
    settings_dir = tmp_path / "settings"
    settings_dir.mkdir()
    for fmt in (QSettings.Format.NativeFormat, QSettings.Format.IniFormat):
        QSettings.setPath(fmt, QSettings.Scope.UserScope, str(settings_dir))
    yield settings_dir
    # setup_logging replaces root handlers; drop them so tests stay independent
    logging.getLogger().handlers.clear()


@pytest.fixture
def registry() -> RecordRegistry:
    return default_registry()


@pytest.fixture
def goblin() -> Monster:
    """Monster with nested stats, tags and two auras."""
    monster = Monster(id=1, name="Goblin", state=DataState.Active, hp=30, attack=5, experience=12)
    monster.base_stats = Stats(
        strength=4,
        dexterity=7,
        intelligence=2,
        elemental_resistances=Resistances(fire=10, ice=0, lightning=5, poison=25),
    )
    monster.tags[0] = "green"
    monster.tags[2] = "small"
    monster.auras[0] = Aura(name="Stench", damage=1, duration=2.5)
    monster.auras[3] = Aura(name="Fear", damage=0, duration=10.0)
    return monster


@pytest.fixture
def side_quest() -> Quest:
    return Quest(id=2, name="Side Quest A", giver_npc=ForeignKey(2))


@pytest.fixture
def sword() -> Item:
    return Item(id=1, name="Sword", value=100, description="Sharp, shiny", damage=12, type="Weapon")
