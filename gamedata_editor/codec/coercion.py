"""
Locale-invariant conversion between scalar field values and CSV text.

Parsing is table driven: one parser per primitive type. Parsers raise
``ValueError`` (or ``KeyError`` for unknown enum names) and leave the
failure policy to the caller.
"""

import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Dict

from ..models.foreign_key import ForeignKey
from .schema import FieldKind

_INT_RE = re.compile(r"[+-]?[0-9]+", re.ASCII)
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?", re.ASCII)
_FLOAT_SPECIALS = {"nan", "+nan", "-nan", "inf", "+inf", "-inf", "infinity", "+infinity", "-infinity"}

TRUE_VALUES = ("true", "1", "yes")
FALSE_VALUES = ("false", "0", "no")


def parse_int(text: str) -> int:
    """Parse an integer written with ASCII digits and an optional sign."""
    text = text.strip()
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"Not an integer: {text!r}")
    return int(text)


def parse_float(text: str) -> float:
    """Parse a float using ``.`` as the decimal separator."""
    text = text.strip()
    if not _FLOAT_RE.fullmatch(text) and text.lower() not in _FLOAT_SPECIALS:
        raise ValueError(f"Not a number: {text!r}")
    return float(text)


def parse_decimal(text: str) -> Decimal:
    text = text.strip()
    if not _FLOAT_RE.fullmatch(text):
        raise ValueError(f"Not a decimal: {text!r}")
    try:
        return Decimal(text)
    except InvalidOperation as e:
        raise ValueError(f"Not a decimal: {text!r}") from e


def parse_bool(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ValueError(f"Not a boolean: {text!r}")


PRIMITIVE_PARSERS: Dict[type, Callable[[str], Any]] = {
    bool: parse_bool,
    int: parse_int,
    float: parse_float,
    Decimal: parse_decimal,
    str: lambda text: text,
}


def coerce_scalar(kind: FieldKind, python_type: Any, text: str) -> Any:
    """Convert CSV text into a value of the declared field type.

    Args:
        kind: Field (or collection element) kind
        python_type: Declared type from the schema
        text: Raw cell text, assumed non-empty

    Returns:
        Converted value

    Raises:
        ValueError: If the text cannot be parsed
        KeyError: If an enum name is unknown
    """
    if kind == FieldKind.ENUM:
        return python_type[text.strip()]

    if kind == FieldKind.FOREIGN_KEY:
        return ForeignKey(id=parse_int(text))

    parser = PRIMITIVE_PARSERS.get(python_type)
    if parser is not None:
        return parser(text)

    # Opaque scalar: try the type's own constructor, else keep the text
    if isinstance(python_type, type):
        return python_type(text)
    return text


def scalar_value(kind: FieldKind, value: Any) -> Any:
    """Project a field value onto the scalar stored in a flattened row.

    Enums become their symbolic name and foreign keys their bare ID.
    """
    if kind == FieldKind.ENUM and isinstance(value, Enum):
        return value.name
    if kind == FieldKind.FOREIGN_KEY:
        return value.id if isinstance(value, ForeignKey) else value
    return value


def render_value(value: Any) -> str:
    """Render a flattened scalar as CSV cell text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, ForeignKey):
        return str(value.id)
    return str(value)
