"""Unit tests for the CSV line codec."""

from gamedata_editor.codec import decode_line, encode_line, parse_table, split_records
from gamedata_editor.codec.csv_line import encode_field


class TestEncoding:
    """Test field quoting."""

    def test_plain_fields_verbatim(self) -> None:
        """Fields without special characters are not quoted."""
        assert encode_line(["1", "Goblin", "Active", ""]) == "1,Goblin,Active,"

    def test_special_characters_quoted(self) -> None:
        """Commas, quotes and line breaks force quoting."""
        assert encode_field("a,b") == '"a,b"'
        assert encode_field('c"d') == '"c""d"'
        assert encode_field("e\nf") == '"e\nf"'
        assert encode_field("g\rh") == '"g\rh"'

    def test_spaces_not_quoted(self) -> None:
        """Whitespace alone does not need quotes."""
        assert encode_field("Side Quest A") == "Side Quest A"


class TestDecoding:
    """Test the two-state decoder."""

    def test_quoting_round_trip(self) -> None:
        """Encoded fields decode back to the originals."""
        fields = ["a,b", 'c"d', "e\nf"]
        assert decode_line(encode_line(fields)) == fields

    def test_doubled_quotes(self) -> None:
        """A doubled quote inside quotes is one literal quote."""
        assert decode_line('"say ""hi""",x') == ['say "hi"', "x"]

    def test_empty_fields(self) -> None:
        """Adjacent commas produce empty fields."""
        assert decode_line("a,,b,") == ["a", "", "b", ""]
        assert decode_line("") == [""]

    def test_unterminated_quote_does_not_raise(self) -> None:
        """An open quoted field ends at the end of the line."""
        assert decode_line('1,"abc,def') == ["1", "abc,def"]


class TestTableParsing:
    """Test splitting and positional association."""

    def test_split_records_skips_empty_lines(self) -> None:
        """Any line break style ends a record; blank lines vanish."""
        assert split_records("h1,h2\r\n1,2\n\n3,4\r") == ["h1,h2", "1,2", "3,4"]

    def test_split_records_keeps_quoted_newlines(self) -> None:
        """Line breaks inside quotes belong to the field."""
        assert split_records('a,b\n"x\ny",z\n') == ["a,b", '"x\ny",z']

    def test_unclosed_quote_ends_at_its_line(self) -> None:
        """A stray quote only affects its own line."""
        text = 'ID,Name\n2,"B\nb"\n1,Bad"name\n3,C'
        assert split_records(text) == ["ID,Name", '2,"B\nb"', '1,Bad"name', "3,C"]

    def test_malformed_line_keeps_other_rows(self) -> None:
        """Rows after a malformed line are still parsed."""
        _, rows = parse_table('ID,Name\n1,Bad"name\n2,B\n3,C\n')
        assert rows == [
            {"ID": "1", "Name": "Badname"},
            {"ID": "2", "Name": "B"},
            {"ID": "3", "Name": "C"},
        ]

    def test_rows_match_header_by_position(self) -> None:
        """Short rows get fewer keys, extra cells are dropped."""
        header, rows = parse_table("ID,Name,State\n1,A,Active\n2\n3,C,Active,extra\n")
        assert header == ["ID", "Name", "State"]
        assert rows == [
            {"ID": "1", "Name": "A", "State": "Active"},
            {"ID": "2"},
            {"ID": "3", "Name": "C", "State": "Active"},
        ]

    def test_header_only_and_empty_text(self) -> None:
        """Text without data lines yields no rows."""
        assert parse_table("ID,Name\n") == (["ID", "Name"], [])
        assert parse_table("") == ([], [])
