"""
Literal value encoding for SQL statements.

Values that are written into statement text (rather than bound as
parameters) pass through these functions. Text is quoted with embedded
quotes doubled; numbers are emitted unquoted in plain decimal form; missing
values become NULL.

Numeric columns are fail-soft: a value that does not parse as a number, or
whose decimal exponent is beyond MAX_EXPONENT, is written as NULL instead
of raising.
"""
import datetime
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Sequence

from sql_bulk.models import ColumnSpec, ColumnType, Row

NULL = "NULL"
QUOTE = "'"

_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")

# Numbers beyond this magnitude would expand into huge plain-decimal literals
MAX_EXPONENT = 1000


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def _to_decimal(value: Any) -> Optional[Decimal]:
    """Parse a value into a finite Decimal, or None if it is not a number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = Decimal(value)
    elif isinstance(value, float):
        # repr gives the shortest string that round-trips
        number = Decimal(repr(value)) if value == value else None
    elif isinstance(value, Decimal):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        if not _NUMBER_RE.match(text):
            return None
        try:
            number = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None

    if number is None or not number.is_finite():
        return None
    if number.is_zero():
        return Decimal(0)
    if abs(number.adjusted()) > MAX_EXPONENT:
        return None
    return number


def is_numeric(value: Any) -> bool:
    """True if the value can be written as a numeric literal."""
    return not _is_missing(value) and _to_decimal(value) is not None


def _canonical(number: Decimal) -> str:
    text = format(number, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text


def encode_text(value: Any) -> str:
    """
    Encode a value as a quoted SQL string literal.

    Embedded quotes are doubled; no other character is altered.

    Args:
        value: Value to encode; non-strings are converted with str()

    Returns:
        The literal, or NULL for None and the empty string
    """
    if _is_missing(value):
        return NULL
    if isinstance(value, datetime.datetime):
        text = value.isoformat(sep=" ")
    elif isinstance(value, datetime.date):
        text = value.isoformat()
    else:
        text = str(value)
    return QUOTE + text.replace(QUOTE, QUOTE + QUOTE) + QUOTE


def encode_numeric(value: Any) -> str:
    """
    Encode a value as an unquoted numeric literal.

    Args:
        value: int, float, Decimal or numeric string

    Returns:
        The number in plain decimal form, or NULL when the value is missing
        or does not parse as a finite number
    """
    if _is_missing(value):
        return NULL
    number = _to_decimal(value)
    if number is None:
        return NULL
    return _canonical(number)


def encode_date(value: Any) -> str:
    """Encode a date or datetime as a quoted ISO 8601 literal."""
    return encode_text(value)


def encode(value: Any, column: ColumnSpec) -> str:
    """Encode a value according to the column's semantic type."""
    if column.type == ColumnType.NUMERIC:
        return encode_numeric(value)
    if column.type == ColumnType.DATE:
        return encode_date(value)
    return encode_text(value)


def encode_row(row: Row, columns: Sequence[ColumnSpec]) -> str:
    """Encode a row into a comma separated literal list in column order."""
    return ", ".join(encode(value, column) for value, column in zip(row, columns))
