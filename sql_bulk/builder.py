"""
INSERT statement synthesis.

One statement is produced per batch, either with bound parameters or with
every value written as an escaped literal and the rows joined by the
dialect's union operator. Literal statements carry no bound-parameter
ceiling, so their batch width is limited only by statement length.
"""
import logging
from dataclasses import dataclass
from typing import Any, Sequence, Tuple

from sql_bulk.config import DialectLimits
from sql_bulk.encoder import encode_row
from sql_bulk.exceptions import StatementTooLongError, ValidationError
from sql_bulk.models import ColumnSpec, EncodingMode, Row, as_columns, validate_identifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InsertStatement:
    """
    A generated statement.

    Attributes:
        sql: Statement text
        params: Flat parameter list in placeholder order (empty in literal mode)
        row_count: Number of rows the statement writes
    """
    sql: str
    params: Tuple[Any, ...] = ()
    row_count: int = 0


def check_batch(columns: Sequence[ColumnSpec], batch: Sequence[Row]) -> None:
    """
    Validate the shape of a batch.

    Raises:
        ValidationError: If there are no columns, the batch is empty or a
            row's field count differs from the column count
    """
    if not columns:
        raise ValidationError("At least one column is required")
    if not batch:
        raise ValidationError("Cannot build a statement for an empty batch")
    for position, row in enumerate(batch):
        if len(row) != len(columns):
            raise ValidationError(
                f"Row {position} has {len(row)} fields but {len(columns)} columns were given"
            )


class BulkInsertBuilder:
    """
    Builds multi-row INSERT statements for one dialect.

    Example:
        >>> from sql_bulk.config import get_dialect
        >>> builder = BulkInsertBuilder(get_dialect("sqlserver"))
        >>> builder.build_insert(
        ...     "employees", ["name", "contract"],
        ...     [("O'Brien", "CDI"), (None, "CDD")],
        ...     EncodingMode.LITERAL_VALUES,
        ... ).sql
        "INSERT INTO employees (name, contract) SELECT 'O''Brien', 'CDI' UNION ALL SELECT NULL, 'CDD'"
    """

    def __init__(self, limits: DialectLimits):
        self.limits = limits.validate()

    def select_rows(self, columns: Sequence[ColumnSpec], batch: Sequence[Row]) -> str:
        """
        Render a batch as literal rows in the dialect's row style.

        Returns either ``SELECT a, b UNION ALL SELECT c, d`` or
        ``VALUES (a, b), (c, d)``.
        """
        if self.limits.row_style == "values":
            return "VALUES " + ", ".join(f"({encode_row(row, columns)})" for row in batch)
        separator = f" {self.limits.union_separator} "
        return separator.join(f"SELECT {encode_row(row, columns)}" for row in batch)

    def build_insert(self, table: str, columns: Sequence[Any], batch: Sequence[Row],
                     mode: EncodingMode = EncodingMode.LITERAL_VALUES) -> InsertStatement:
        """
        Build the INSERT statement for one batch.

        Args:
            table: Target table name (from configuration, never from row data)
            columns: Column specs or names, in the order of the row fields
            batch: Rows of the batch
            mode: Bound parameters or literal values

        Returns:
            The statement, its parameters and row count

        Raises:
            ValidationError: If the batch is malformed, an identifier is unsafe,
                the batch needs more parameters than the dialect allows or the
                statement exceeds the dialect's length limit
        """
        validate_identifier(table)
        specs = as_columns(columns)
        check_batch(specs, batch)
        mode = EncodingMode(mode)

        column_list = ", ".join(column.name for column in specs)
        prefix = f"INSERT INTO {table} ({column_list}) "

        if mode == EncodingMode.BOUND_PARAMETERS:
            param_count = len(batch) * len(specs)
            if param_count > self.limits.max_bound_parameters:
                raise ValidationError(
                    f"Batch needs {param_count} parameters but {self.limits.name} "
                    f"allows {self.limits.max_bound_parameters}"
                )
            row_placeholders = "(" + ", ".join([self.limits.placeholder] * len(specs)) + ")"
            sql = prefix + "VALUES " + ", ".join([row_placeholders] * len(batch))
            params = tuple(value for row in batch for value in row)
        else:
            sql = prefix + self.select_rows(specs, batch)
            params = ()

        self.check_length(sql)
        logger.debug(f"Built {mode.value} INSERT into {table}: {len(batch)} rows, {len(sql)} chars")
        return InsertStatement(sql=sql, params=params, row_count=len(batch))

    def check_length(self, sql: str) -> None:
        """Raise StatementTooLongError if the statement exceeds the length limit."""
        limit = self.limits.max_statement_length
        if limit is not None and len(sql) > limit:
            raise StatementTooLongError(
                f"Statement of {len(sql)} characters exceeds the {self.limits.name} limit of {limit}",
                length=len(sql),
                limit=limit,
            )
