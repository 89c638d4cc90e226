"""
Set-based bulk updates through a staging table.

Each batch of (key, new values...) rows is written into a uniquely named,
session-scoped staging table, applied to the target with one UPDATE joined
on the key, and the staging table is dropped again on every exit path.

Target rows whose key is not staged are left untouched. Staged keys that
match no target row are ignored. When a batch holds the same key more than
once the last occurrence wins.
"""
import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from sql_bulk.adapters.base import execute_statement
from sql_bulk.builder import BulkInsertBuilder, check_batch
from sql_bulk.config import DialectLimits
from sql_bulk.exceptions import ExecutionError
from sql_bulk.models import ColumnSpec, EncodingMode, Row, as_columns, validate_identifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StagingHandle:
    """A staging table owned by one update batch."""
    name: str
    key: ColumnSpec
    columns: Tuple[ColumnSpec, ...]

    @property
    def all_columns(self) -> Tuple[ColumnSpec, ...]:
        return (self.key,) + self.columns


def deduplicate(batch: Sequence[Row]) -> List[Row]:
    """
    Collapse rows sharing a key (first field), keeping the last occurrence.

    Rows keep the position of the key's first appearance.
    """
    latest: Dict[Any, Row] = {}
    for row in batch:
        latest[row[0]] = row
    return list(latest.values())


class StagedBulkUpdater:
    """
    Applies batches of updates to a table via a staging table and a join.

    Attributes:
        adapter: Execution sink
        limits: Dialect limits and syntax settings
        builder: INSERT builder used to populate the staging table
    """

    def __init__(self, adapter: Any, limits: DialectLimits,
                 builder: Optional[BulkInsertBuilder] = None):
        self.adapter = adapter
        self.limits = limits.validate()
        self.builder = builder or BulkInsertBuilder(self.limits)

    def new_staging_name(self) -> str:
        return f"{self.limits.temp_table_prefix}stg_{uuid.uuid4().hex}"

    def _column_type(self, column: ColumnSpec) -> str:
        return column.sql_type or self.limits.staging_types[column.type.value]

    def create_table_sql(self, handle: StagingHandle) -> str:
        definitions = ", ".join(
            f"{column.name} {self._column_type(column)}" for column in handle.all_columns
        )
        return f"{self.limits.create_temp_table} {handle.name} ({definitions})"

    def drop_table_sql(self, handle: StagingHandle) -> str:
        return f"DROP TABLE {handle.name}"

    def update_sql(self, table: str, handle: StagingHandle) -> str:
        """
        Build the UPDATE that applies the staged values to the target.

        Args:
            table: Target table name
            handle: Staging table

        Returns:
            The UPDATE statement in the dialect's update style
        """
        key = handle.key.name
        style = self.limits.update_style

        if style == "from_join":
            assignments = ", ".join(f"tgt.{c.name} = stg.{c.name}" for c in handle.columns)
            return (
                f"UPDATE tgt SET {assignments} FROM {table} AS tgt "
                f"INNER JOIN {handle.name} AS stg ON tgt.{key} = stg.{key}"
            )
        if style == "from":
            assignments = ", ".join(f"{c.name} = stg.{c.name}" for c in handle.columns)
            return (
                f"UPDATE {table} AS tgt SET {assignments} FROM {handle.name} AS stg "
                f"WHERE tgt.{key} = stg.{key}"
            )
        if style == "join":
            assignments = ", ".join(f"tgt.{c.name} = stg.{c.name}" for c in handle.columns)
            return (
                f"UPDATE {table} AS tgt INNER JOIN {handle.name} AS stg "
                f"ON tgt.{key} = stg.{key} SET {assignments}"
            )

        match = f"stg.{key} = {table}.{key}"
        assignments = ", ".join(
            f"{c.name} = (SELECT stg.{c.name} FROM {handle.name} AS stg WHERE {match})"
            for c in handle.columns
        )
        return (
            f"UPDATE {table} SET {assignments} "
            f"WHERE EXISTS (SELECT 1 FROM {handle.name} AS stg WHERE {match})"
        )

    @contextmanager
    def staging_area(self, key: ColumnSpec, columns: Sequence[ColumnSpec]) -> Iterator[StagingHandle]:
        """
        Create a staging table and drop it when the block exits.

        If the block raises, a failure to drop the table is logged and the
        original exception propagates. If the block succeeds, a failure to
        drop the table raises ExecutionError.

        Args:
            key: Key column
            columns: Changed columns

        Yields:
            The staging handle
        """
        handle = StagingHandle(self.new_staging_name(), key, tuple(columns))
        execute_statement(self.adapter, self.create_table_sql(handle))
        logger.debug(f"Created staging table {handle.name}")

        try:
            yield handle
        except BaseException:
            self._discard(handle, raise_errors=False)
            raise
        else:
            self._discard(handle, raise_errors=True)

    def _discard(self, handle: StagingHandle, raise_errors: bool) -> None:
        try:
            execute_statement(self.adapter, self.drop_table_sql(handle))
            logger.debug(f"Dropped staging table {handle.name}")
        except ExecutionError as e:
            if raise_errors:
                raise
            logger.error(f"Failed to drop staging table {handle.name} after an earlier error: {str(e)}")

    def update_batch(self, table: str, key: Any, columns: Sequence[Any],
                     batch: Sequence[Row]) -> int:
        """
        Apply one batch of updates.

        Args:
            table: Target table name
            key: Key column (spec or name)
            columns: Changed columns (specs or names)
            batch: Rows of (key, value1, value2, ...)

        Returns:
            Number of target rows updated, as reported by the driver

        Raises:
            ValidationError: If the batch is malformed or an identifier is unsafe
            ExecutionError: If populating or applying fails; the staging table
                has been dropped before this is raised
        """
        validate_identifier(table)
        key_spec = as_columns([key])[0]
        specs = as_columns(columns)
        check_batch((key_spec,) + specs, batch)

        rows = deduplicate(batch)
        if len(rows) < len(batch):
            logger.debug(f"Collapsed {len(batch) - len(rows)} duplicate keys in update batch")

        with self.staging_area(key_spec, specs) as handle:
            populate = self.builder.build_insert(
                handle.name, handle.all_columns, rows, EncodingMode.LITERAL_VALUES
            )
            execute_statement(self.adapter, populate.sql)
            updated = execute_statement(self.adapter, self.update_sql(table, handle))

        logger.debug(f"Updated {updated} rows of {table} from {len(rows)} staged rows")
        return updated
