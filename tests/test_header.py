"""Unit tests for schema-aware header ordering."""

from gamedata_editor.codec import HeaderComparator, sort_headers
from gamedata_editor.models import Monster, Quest


class TestHeaderComparator:
    """Test column path ordering."""

    def test_schema_order_at_every_level(self) -> None:
        """Columns follow declaration order, nested and indexed alike."""
        headers = [
            "Auras.0.Duration",
            "Tags.1",
            "BaseStats.ElementalResistances.Fire",
            "HP",
            "Auras.0.Name",
            "ID",
            "BaseStats.Strength",
            "State",
            "Name",
            "Tags.0",
            "BaseStats.ElementalResistances.Poison",
            "Auras.0.Damage",
        ]
        assert HeaderComparator(Monster).sort(headers) == [
            "ID",
            "Name",
            "State",
            "HP",
            "BaseStats.Strength",
            "BaseStats.ElementalResistances.Fire",
            "BaseStats.ElementalResistances.Poison",
            "Tags.0",
            "Tags.1",
            "Auras.0.Name",
            "Auras.0.Damage",
            "Auras.0.Duration",
        ]

    def test_indices_compare_numerically(self) -> None:
        """Index 10 sorts after index 2."""
        headers = ["Auras.10.Name", "Auras.2.Name", "Auras.1.Name"]
        assert sort_headers(Monster, headers) == ["Auras.1.Name", "Auras.2.Name", "Auras.10.Name"]

    def test_index_groups_stay_together(self) -> None:
        """All columns of one element come before the next element."""
        headers = ["Auras.1.Name", "Auras.0.Duration", "Auras.1.Damage", "Auras.0.Name"]
        assert sort_headers(Monster, headers) == [
            "Auras.0.Name",
            "Auras.0.Duration",
            "Auras.1.Name",
            "Auras.1.Damage",
        ]

    def test_unknown_names_sort_last_alphabetically(self) -> None:
        """Columns missing from the schema go after known ones."""
        assert sort_headers(Quest, ["Zeta", "GiverNPC", "Alpha", "ID"]) == ["ID", "GiverNPC", "Alpha", "Zeta"]

    def test_prefix_sorts_first(self) -> None:
        """A path sorts before its own extensions."""
        comparator = HeaderComparator(Monster)
        assert comparator.compare("Tags", "Tags.0") < 0
        assert comparator.compare("Tags.0", "Tags") > 0
        assert comparator.compare("Tags.0", "Tags.0") == 0

    def test_duplicates_removed(self) -> None:
        """Sorting a union yields each column once."""
        assert sort_headers(Quest, ["Name", "ID", "Name", "ID"]) == ["ID", "Name"]
