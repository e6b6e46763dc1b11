"""
CSV line codec.

Encodes and decodes single CSV records with RFC 4180 style quoting:
a field is quoted only when it contains a comma, a double quote or a line
break, and embedded quotes are doubled. Decoding never raises; malformed
input is read as well as possible and the open field ends with the line.
"""

from enum import Enum, auto
from typing import Dict, Iterable, List, Tuple

DELIMITER = ","
QUOTE = '"'
LINE_BREAKS = ("\r", "\n")

_CHARS_REQUIRING_QUOTES = (DELIMITER, QUOTE, "\n", "\r")


class LineState(Enum):
    """Decoder state while scanning a line."""

    UNQUOTED = auto()
    QUOTED = auto()


def encode_field(value: str) -> str:
    """Quote a single field if it needs it."""
    if any(char in value for char in _CHARS_REQUIRING_QUOTES):
        return QUOTE + value.replace(QUOTE, QUOTE * 2) + QUOTE
    return value


def encode_line(fields: Iterable[str]) -> str:
    """Encode fields into one CSV record (without line terminator).

    Example:
        >>> encode_line(["a,b", 'c"d', "plain"])
        '"a,b","c""d",plain'
    """
    return DELIMITER.join(encode_field(field) for field in fields)


def decode_line(line: str) -> List[str]:
    """Split one CSV record into its fields.

    A ``"`` toggles quoting, ``""`` inside a quoted field is a literal quote,
    and commas only split fields outside quotes. An unterminated quoted field
    simply ends at the end of the line.
    """
    fields: List[str] = []
    current: List[str] = []
    state = LineState.UNQUOTED
    index = 0
    length = len(line)

    while index < length:
        char = line[index]
        if state == LineState.QUOTED:
            if char == QUOTE:
                if index + 1 < length and line[index + 1] == QUOTE:
                    current.append(QUOTE)
                    index += 1
                else:
                    state = LineState.UNQUOTED
            else:
                current.append(char)
        else:
            if char == QUOTE:
                state = LineState.QUOTED
            elif char == DELIMITER:
                fields.append("".join(current))
                current = []
            else:
                current.append(char)
        index += 1

    fields.append("".join(current))
    return fields


def _scan_record(text: str, start: int) -> Tuple[int, bool]:
    """Find the line break ending the record at ``start``.

    Returns:
        Tuple of (end index, whether every quote opened in the record closed)
    """
    in_quotes = False
    for index in range(start, len(text)):
        char = text[index]
        if char == QUOTE:
            # Doubled quotes toggle twice, which leaves the state unchanged
            in_quotes = not in_quotes
        elif char in LINE_BREAKS and not in_quotes:
            return index, True
    return len(text), not in_quotes


def _line_end(text: str, start: int) -> int:
    for index in range(start, len(text)):
        if text[index] in LINE_BREAKS:
            return index
    return len(text)


def split_records(text: str) -> List[str]:
    """Split CSV text into non-empty record lines.

    Line breaks inside quoted fields belong to the field, every other
    ``\\r``, ``\\n`` or ``\\r\\n`` ends a record. A record whose quote never
    closes ends at its own line break instead, so a stray ``"`` in one
    cell does not swallow the lines after it.
    """
    records: List[str] = []
    start = 0

    while start < len(text):
        end, balanced = _scan_record(text, start)
        if not balanced:
            end = _line_end(text, start)
        if end > start:
            records.append(text[start:end])
        start = end + 1

    return records


def parse_table(text: str) -> Tuple[List[str], List[Dict[str, str]]]:
    """Parse CSV text into a header and positional row mappings.

    The first non-empty line is the header. Each following line is matched
    to the header by position up to ``min(len(header), len(cells))``, so a
    short line simply yields fewer keys. Text with fewer than two non-empty
    lines has no rows.

    Returns:
        Tuple of (header, rows)
    """
    lines = split_records(text)
    if not lines:
        return [], []

    header = decode_line(lines[0])
    rows: List[Dict[str, str]] = []
    for line in lines[1:]:
        cells = decode_line(line)
        rows.append({key: value for key, value in zip(header, cells)})
    return header, rows
