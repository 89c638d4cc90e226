"""
Data model for SQL Bulk.

Rows are plain tuples of scalars; columns carry a semantic type that decides
how values are rendered as SQL literals.
"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, NamedTuple, Optional, Sequence, Tuple

from sql_bulk.exceptions import ValidationError

# A row is an ordered tuple of scalars (str, int, float, Decimal, date or None)
Row = Tuple[Any, ...]

_IDENTIFIER_PART = r"[A-Za-z_][A-Za-z0-9_$]*"
_IDENTIFIER_RE = re.compile(rf"^#{{0,2}}{_IDENTIFIER_PART}(\.{_IDENTIFIER_PART}){{0,2}}$")


class ColumnType(str, Enum):
    """Semantic column type used to pick an encoding rule."""
    TEXT = "text"
    NUMERIC = "numeric"
    DATE = "date"


class EncodingMode(str, Enum):
    """How row values reach the database."""
    BOUND_PARAMETERS = "bound_parameters"
    LITERAL_VALUES = "literal_values"


@dataclass(frozen=True)
class ColumnSpec:
    """
    A target column.

    Attributes:
        name: Column name, taken from caller configuration only
        type: Semantic type of the column
        sql_type: Optional SQL type used when the column is staged
    """
    name: str
    type: ColumnType = ColumnType.TEXT
    sql_type: Optional[str] = None

    def __post_init__(self):
        validate_identifier(self.name)
        # Accept plain strings such as "numeric"
        object.__setattr__(self, "type", ColumnType(self.type))


class BatchRange(NamedTuple):
    """Half-open index range [start, stop) of one batch."""
    index: int
    start: int
    stop: int

    @property
    def size(self) -> int:
        return self.stop - self.start


def validate_identifier(name: str) -> str:
    """
    Check that a table or column name is a plain SQL identifier.

    Identifiers are interpolated into statement text unquoted, so anything
    that is not a simple (optionally schema-qualified) name is rejected.

    Args:
        name: Identifier to check

    Returns:
        The identifier unchanged

    Raises:
        ValidationError: If the identifier contains anything else
    """
    if not isinstance(name, str) or not _IDENTIFIER_RE.match(name):
        raise ValidationError(f"Unsafe SQL identifier: {name!r}")
    return name


def as_columns(columns: Sequence[Any]) -> Tuple[ColumnSpec, ...]:
    """
    Normalize a column list into ColumnSpec instances.

    Accepts ColumnSpec objects, bare names (treated as text columns) and
    (name, type) pairs.
    """
    specs = []
    for column in columns:
        if isinstance(column, ColumnSpec):
            specs.append(column)
        elif isinstance(column, str):
            specs.append(ColumnSpec(column))
        else:
            name, column_type = column
            specs.append(ColumnSpec(name, ColumnType(column_type)))
    return tuple(specs)
