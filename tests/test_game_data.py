"""Tests for the game data service: JSON store, CSV folders and row operations."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import orjson
import pytest

from gamedata_editor.game_data import GameDataService, RecordJsonConverter, RecordFormatError
from gamedata_editor.models import (
    Aura,
    BaseDataRow,
    DataState,
    FixedArray,
    ForeignKey,
    Item,
    Monster,
    Quest,
)
from gamedata_editor.registry import RecordRegistry
from gamedata_editor.settings import AppSettings


@dataclass
class Escort:
    npc: ForeignKey[Monster] = field(default_factory=ForeignKey)


@dataclass
class Convoy(BaseDataRow):
    """Row referencing monsters from nested records and lists."""

    lead: Optional[Escort] = None
    escorts: List[Escort] = field(default_factory=list)
    npcs: List[ForeignKey[Monster]] = field(default_factory=list)


@pytest.fixture
def service(goblin: Monster, side_quest: Quest, sword: Item) -> GameDataService:
    """Service holding one row per built-in table."""
    svc = GameDataService()
    svc.get_table("Monsters").rows.append(goblin)  # type: ignore[union-attr]
    svc.get_table("Quests").rows.append(side_quest)  # type: ignore[union-attr]
    svc.get_table("Items").rows.append(sword)  # type: ignore[union-attr]
    return svc


def write_json(path: Path, data: object) -> None:
    path.write_bytes(orjson.dumps(data))


class TestJsonStore:
    """Test loading and saving table files."""

    def test_tables_follow_registry(self) -> None:
        """A new service has one empty table per registered type."""
        svc = GameDataService()
        assert [table.name for table in svc.tables] == ["Items", "Monsters", "Quests"]
        assert all(len(table) == 0 for table in svc.tables)
        assert svc.get_table_for_type(Monster) is svc.get_table("Monsters")

    def test_save_writes_schema_ordered_json(self, service: GameDataService, tmp_path: Path) -> None:
        """Rows are stored with PascalCase keys, enum names and bare IDs."""
        written = service.save_to_folder(tmp_path / "data")
        assert sorted(path.name for path in written) == ["Items.json", "Monsters.json", "Quests.json"]

        monsters = orjson.loads((tmp_path / "data" / "Monsters.json").read_bytes())
        assert list(monsters[0]) == ["ID", "Name", "State", "HP", "Attack", "Experience", "BaseStats", "Tags", "Auras"]
        assert monsters[0]["State"] == "Active"
        assert monsters[0]["Tags"] == ["green", "", "small"]
        assert len(monsters[0]["Auras"]) == 8
        assert monsters[0]["Auras"][1] is None
        assert monsters[0]["BaseStats"]["ElementalResistances"]["Poison"] == 25

        quests = orjson.loads((tmp_path / "data" / "Quests.json").read_bytes())
        assert quests[0]["GiverNPC"] == 2

    def test_round_trip(self, service: GameDataService, goblin: Monster, side_quest: Quest, sword: Item, tmp_path: Path) -> None:
        """Saved tables load back equal."""
        service.save_to_folder(tmp_path)
        loaded = GameDataService()
        assert loaded.load_from_folder(tmp_path) == 3
        assert loaded.get_table("Monsters").rows == [goblin]  # type: ignore[union-attr]
        assert loaded.get_table("Quests").rows == [side_quest]  # type: ignore[union-attr]
        assert loaded.get_table("Items").rows == [sword]  # type: ignore[union-attr]

    def test_missing_and_broken_files(self, tmp_path: Path) -> None:
        """Broken files leave their table empty, loading continues."""
        (tmp_path / "Items.json").write_bytes(b"{not json")
        write_json(tmp_path / "Quests.json", [{"ID": 1, "Name": "Ok"}])
        svc = GameDataService()
        assert svc.load_from_folder(tmp_path) == 1
        assert len(svc.get_table("Items")) == 0  # type: ignore[arg-type]
        assert len(svc.get_table("Monsters")) == 0  # type: ignore[arg-type]
        assert svc.get_table("Quests").rows[0].name == "Ok"  # type: ignore[union-attr]

    def test_bad_rows_skipped_and_sorted(self, tmp_path: Path) -> None:
        """Unconvertible rows are dropped; the rest are sorted by ID."""
        write_json(
            tmp_path / "Quests.json",
            [{"ID": 3, "Name": "C"}, {"ID": 2, "State": "Nope"}, {"id": 1, "name": "lower"}],
        )
        svc = GameDataService()
        svc.load_from_folder(tmp_path)
        rows = svc.get_table("Quests").rows  # type: ignore[union-attr]
        assert [row.id for row in rows] == [1, 3]
        assert rows[0].name == "lower"

    def test_load_replaces_previous_rows(self, service: GameDataService, tmp_path: Path) -> None:
        """Loading starts from empty tables."""
        svc = service
        svc.load_from_folder(tmp_path)
        assert all(len(table) == 0 for table in svc.tables)

    def test_folder_required(self) -> None:
        """Without a folder argument or settings there is nothing to load."""
        with pytest.raises(ValueError):
            GameDataService().load_from_folder()

    def test_folder_from_settings(self, service: GameDataService, tmp_path: Path) -> None:
        """Configured folders are used when no folder is passed."""
        settings = AppSettings()
        settings.data_folder_path = tmp_path / "store"
        settings.csv_folder_path = tmp_path / "csv"
        service.settings = settings

        service.save_to_folder()
        assert (tmp_path / "store" / "Monsters.json").is_file()
        service.export_csv_folder()
        assert (tmp_path / "csv" / "Quests.csv").is_file()


class TestRecordJsonConverter:
    """Test record <-> JSON conversion details."""

    def test_numeric_strings_accepted(self) -> None:
        """Numbers stored as strings are parsed."""
        monster = RecordJsonConverter().from_json(Monster, {"ID": "4", "HP": "12", "Auras": [{"Duration": 3}]})
        assert monster.id == 4
        assert monster.hp == 12
        assert monster.auras[0].duration == 3.0
        assert isinstance(monster.auras[0].duration, float)

    def test_wrong_shape_raises(self) -> None:
        """Shape errors are reported as RecordFormatError."""
        converter = RecordJsonConverter()
        with pytest.raises(RecordFormatError):
            converter.from_json(Monster, {"Tags": "not a list"})
        with pytest.raises(RecordFormatError):
            converter.from_json(Quest, {"GiverNPC": {"ID": 1}})
        with pytest.raises(RecordFormatError):
            converter.from_json(Quest, [])  # type: ignore[arg-type]

    def test_fixed_array_keeps_stored_length(self) -> None:
        """A stored array of the wrong length is kept for fix_fields."""
        monster = RecordJsonConverter().from_json(Monster, {"Tags": ["a", "b"]})
        assert isinstance(monster.tags, FixedArray)
        assert len(monster.tags) == 2


class TestCsvFolders:
    """Test CSV folder export and import."""

    def test_export_skips_empty_tables(self, tmp_path: Path) -> None:
        """Only tables with rows are written; the folder is created."""
        svc = GameDataService()
        svc.add_new_row(svc.get_table("Items"))  # type: ignore[arg-type]
        written = svc.export_csv_folder(tmp_path / "out")
        assert [path.name for path in written] == ["Items.csv"]
        assert (tmp_path / "out" / "Items.csv").read_text(encoding="utf-8").startswith("ID,Name,State")

    def test_import_restores_values(self, service: GameDataService, tmp_path: Path) -> None:
        """Importing an export undoes later edits to existing rows."""
        service.export_csv_folder(tmp_path)
        goblin = service.get_table("Monsters").rows[0]  # type: ignore[union-attr]
        goblin.name = "Edited"
        goblin.tags[0] = "changed"

        results = service.import_csv_folder(tmp_path)
        assert set(results) == {"Items", "Monsters", "Quests"}
        assert results["Monsters"].updated == 1
        assert goblin.name == "Goblin"
        assert goblin.tags[0] == "green"

    def test_import_skips_missing_files(self, service: GameDataService, tmp_path: Path) -> None:
        """Tables without a CSV file are left alone."""
        (tmp_path / "Items.csv").write_text("ID,Name\n1,Axe\n", encoding="utf-8")
        results = service.import_csv_folder(tmp_path)
        assert list(results) == ["Items"]
        assert service.get_table("Items").rows[0].name == "Axe"  # type: ignore[union-attr]
        assert service.get_table("Monsters").rows[0].name == "Goblin"  # type: ignore[union-attr]

    def test_load_from_csv_folder(self, service: GameDataService, goblin: Monster, tmp_path: Path) -> None:
        """Tables rebuilt from CSV equal the exported ones."""
        service.export_csv_folder(tmp_path)
        (tmp_path / "Items.csv").unlink()

        loaded = GameDataService()
        assert loaded.load_from_csv_folder(tmp_path) == 2
        assert loaded.get_table("Monsters").rows == [goblin]  # type: ignore[union-attr]
        assert len(loaded.get_table("Items")) == 0  # type: ignore[arg-type]


class TestRowOperations:
    """Test add, copy, delete and ID changes."""

    def test_add_new_row_uses_lowest_free_id(self) -> None:
        """New rows fill the first gap in the ID sequence."""
        svc = GameDataService()
        table = svc.get_table("Items")
        assert table is not None
        assert svc.add_new_row(table).id == 1
        table.rows.extend([Item(id=2), Item(id=4)])

        row = svc.add_new_row(table)
        assert row.id == 3
        assert row.name == "New Item"
        assert row.state == DataState.Active
        assert [r.id for r in table.rows] == [1, 2, 3, 4]

    def test_copy_row_is_deep(self, service: GameDataService, goblin: Monster) -> None:
        """The copy gets the next free ID and shares no nested objects."""
        table = service.get_table("Monsters")
        assert table is not None
        table.rows.append(Monster(id=2, name="Orc"))

        copy = service.copy_row(table, goblin)
        assert copy.id == 3
        assert copy.name == "Goblin (Copy)"
        assert [r.id for r in table.rows] == [1, 2, 3]
        assert copy.base_stats == goblin.base_stats
        assert copy.base_stats is not goblin.base_stats
        assert copy.auras == goblin.auras
        assert copy.auras[0] is not goblin.auras[0]

    def test_copy_row_fills_gap(self, service: GameDataService, goblin: Monster) -> None:
        """A free ID right after the source is used and kept in order."""
        table = service.get_table("Monsters")
        assert table is not None
        table.rows.append(Monster(id=3, name="Troll"))
        copy = service.copy_row(table, goblin)
        assert copy.id == 2
        assert table.rows.index(copy) == 1

    def test_delete_row(self, service: GameDataService, goblin: Monster) -> None:
        """Deleting removes the row once."""
        table = service.get_table("Monsters")
        assert table is not None
        assert service.delete_row(table, goblin) is True
        assert service.delete_row(table, goblin) is False
        assert len(table) == 0


class TestForeignKeyUpdates:
    """Test ID changes following references."""

    @pytest.fixture
    def convoy_service(self, goblin: Monster) -> GameDataService:
        registry = RecordRegistry()
        registry.register(Monster)
        registry.register(Quest)
        registry.register(Convoy)
        registry.register(Escort)
        svc = GameDataService(registry=registry)
        svc.get_table("Monsters").rows.extend([goblin, Monster(id=5, name="Orc")])  # type: ignore[union-attr]
        svc.get_table("Quests").rows.extend(  # type: ignore[union-attr]
            [Quest(id=1, giver_npc=ForeignKey(1)), Quest(id=2, giver_npc=ForeignKey(5))]
        )
        svc.get_table("Convoys").rows.append(  # type: ignore[union-attr]
            Convoy(
                id=1,
                lead=Escort(ForeignKey(1)),
                escorts=[Escort(ForeignKey(1)), Escort(ForeignKey(5)), Escort(ForeignKey(1))],
                npcs=[ForeignKey(5), ForeignKey(1)],
            )
        )
        return svc

    def test_change_row_id_rewrites_references(self, convoy_service: GameDataService, goblin: Monster) -> None:
        """Top-level, nested and collection references are updated."""
        monsters = convoy_service.get_table("Monsters")
        assert monsters is not None

        count = convoy_service.change_row_id(monsters, goblin, 10)
        assert count == 5
        assert goblin.id == 10
        assert [row.id for row in monsters.rows] == [5, 10]

        quests = convoy_service.get_table("Quests").rows  # type: ignore[union-attr]
        assert [q.giver_npc.id for q in quests] == [10, 5]

        convoy = convoy_service.get_table("Convoys").rows[0]  # type: ignore[union-attr]
        assert convoy.lead.npc.id == 10
        assert [e.npc.id for e in convoy.escorts] == [10, 5, 10]
        assert [k.id for k in convoy.npcs] == [5, 10]
        assert convoy.id == 1

    def test_duplicate_id_rejected(self, convoy_service: GameDataService, goblin: Monster) -> None:
        """Changing to an ID in use raises and changes nothing."""
        monsters = convoy_service.get_table("Monsters")
        assert monsters is not None
        with pytest.raises(ValueError):
            convoy_service.change_row_id(monsters, goblin, 5)
        assert goblin.id == 1

    def test_same_id_is_noop(self, convoy_service: GameDataService, goblin: Monster) -> None:
        """Keeping the ID rewrites nothing."""
        monsters = convoy_service.get_table("Monsters")
        assert monsters is not None
        assert convoy_service.change_row_id(monsters, goblin, 1) == 0

    def test_only_matching_type_updated(self, convoy_service: GameDataService) -> None:
        """References to other types with the same ID are untouched."""
        assert convoy_service.update_foreign_key_references(Quest, 1, 99) == 0


class TestFixFields:
    """Test fixed array repair."""

    def test_fix_fields(self) -> None:
        """Wrong lengths are resized and empty nested slots filled."""
        svc = GameDataService()
        monster = Monster(id=1)
        monster.tags = FixedArray.from_list(["a", "b"], 2, str)
        svc.get_table("Monsters").rows.append(monster)  # type: ignore[union-attr]

        assert svc.fix_fields() == (1, 8)
        assert monster.tags == ["a", "b", ""]
        assert len(monster.tags) == 3
        assert all(aura == Aura() for aura in monster.auras)
        assert monster.auras[0] is not monster.auras[1]
        assert monster.base_stats is None

        assert svc.fix_fields() == (0, 0)
