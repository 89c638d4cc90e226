"""
Bulk write orchestration.

BulkWriter plans the batches of a run, turns each into statements with
BulkInsertBuilder or StagedBulkUpdater and executes them inside a single
transaction. Any failure rolls back the whole run and is re-raised.
"""
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from sql_bulk.adapters.base import execute_statement
from sql_bulk.adapters.dry_run import DryRunAdapter
from sql_bulk.builder import BulkInsertBuilder
from sql_bulk.config import DialectLimits, get_dialect
from sql_bulk.exceptions import StatementTooLongError, ValidationError
from sql_bulk.models import EncodingMode, Row, as_columns
from sql_bulk.planner import plan
from sql_bulk.query_collector import QueryCollector
from sql_bulk.updater import StagedBulkUpdater

logger = logging.getLogger(__name__)


@dataclass
class WriteResult:
    """
    Outcome of one run.

    Attributes:
        rows: Number of input rows
        batches: Number of planned batches
        statements: Number of write statements issued (after any splitting)
        affected: Rows affected as reported by the driver
        elapsed: Wall clock seconds for the run
    """
    rows: int = 0
    batches: int = 0
    statements: int = 0
    affected: int = 0
    elapsed: float = 0.0


def max_query_size(adapter: Any) -> Optional[int]:
    """The adapter's maximum statement size, or None if it reports none."""
    get_size = getattr(adapter, "get_max_query_size", None)
    size = get_size() if callable(get_size) else None
    if isinstance(size, int) and not isinstance(size, bool) and size > 0:
        return size
    return None


def fit_to_adapter(limits: DialectLimits, adapter: Any) -> DialectLimits:
    """
    Tighten max_statement_length to the adapter's maximum query size.

    The smaller of the two limits applies.
    """
    size = max_query_size(adapter)
    if size is None:
        return limits
    if limits.max_statement_length is not None and limits.max_statement_length <= size:
        return limits
    logger.debug(f"Limiting statements to {size} characters for {type(adapter).__name__}")
    return limits.with_overrides(max_statement_length=size)


class BulkWriter:
    """
    Writes many rows with as few statements as the dialect allows.

    Example:
        >>> writer = BulkWriter(adapter, get_dialect("sqlserver"))
        >>> writer.insert_rows("employees", [("id", "text"), ("salary", "numeric")], rows)
        >>> writer.update_rows("employees", "id", [("salary", "numeric")], changes)
    """

    def __init__(
        self,
        adapter: Any,
        limits: Optional[DialectLimits] = None,
        mode: EncodingMode = EncodingMode.LITERAL_VALUES,
        batch_size: Optional[int] = None,
        dry_run: bool = False,
        query_collector: Optional[QueryCollector] = None
    ):
        """
        Initialize a bulk writer.

        Args:
            adapter: Execution sink (in dry run mode only its maximum query size is used)
            limits: Dialect limits (defaults to the generic dialect)
            mode: Encoding mode for inserts
            batch_size: Rows per literal statement (defaults to limits.batch_size)
            dry_run: Collect statements instead of executing them
            query_collector: Collector for dry run mode
        """
        limits = (limits or get_dialect("generic")).validate()
        self.mode = EncodingMode(mode)
        self.batch_size = batch_size
        self.dry_run = dry_run
        if dry_run:
            self.query_collector = query_collector if query_collector is not None else QueryCollector()
            self.adapter = DryRunAdapter(self.query_collector, max_query_size(adapter))
        else:
            self.query_collector = query_collector
            self.adapter = adapter
        self.limits = fit_to_adapter(limits, self.adapter)
        self.builder = BulkInsertBuilder(self.limits)
        self.updater = StagedBulkUpdater(self.adapter, self.limits, self.builder)

    def insert_rows(self, table: str, columns: Sequence[Any], rows: Sequence[Row]) -> WriteResult:
        """
        Insert all rows into a table.

        Args:
            table: Target table name
            columns: Column specs, names or (name, type) pairs in row field order
            rows: Rows to insert

        Returns:
            WriteResult for the run
        """
        specs = as_columns(columns)

        def write(batch: Sequence[Row]) -> int:
            statement = self.builder.build_insert(table, specs, batch, self.mode)
            return execute_statement(self.adapter, statement.sql, statement.params)

        return self._run("INSERT", table, rows, len(specs), self.mode, write)

    def update_rows(self, table: str, key_column: Any, columns: Sequence[Any],
                    rows: Sequence[Row]) -> WriteResult:
        """
        Update existing rows of a table, matched on a key column.

        Args:
            table: Target table name
            key_column: Key column spec or name
            columns: Changed columns
            rows: Rows of (key, value1, value2, ...)

        Returns:
            WriteResult for the run
        """
        key_spec = as_columns([key_column])[0]
        specs = as_columns(columns)

        def write(batch: Sequence[Row]) -> int:
            return self.updater.update_batch(table, key_spec, specs, batch)

        return self._run("UPDATE", table, rows, len(specs) + 1, EncodingMode.LITERAL_VALUES, write)

    def _run(self, label: str, table: str, rows: Sequence[Row], column_count: int,
             mode: EncodingMode, write: Callable[[Sequence[Row]], int]) -> WriteResult:
        rows = list(rows)
        batch_plan = plan(len(rows), column_count, self.limits, mode, self.batch_size)
        result = WriteResult(rows=len(rows), batches=len(batch_plan))
        if not rows:
            logger.info(f"No rows to {label.lower()} for {table}")
            return result

        logger.info(f"{label} {len(rows)} rows into {table} in {len(batch_plan)} batches "
                    f"(batch size {batch_plan.batch_size}, {mode.value})")
        start = time.perf_counter()

        self.adapter.begin_transaction()
        try:
            for batch_range, batch in zip(batch_plan, batch_plan.batches(rows)):
                logger.debug(f"Writing batch {batch_range.index + 1}/{len(batch_plan)} "
                             f"(rows {batch_range.start}-{batch_range.stop - 1})")
                statements, affected = self._write_fitting(batch, write)
                result.statements += statements
                result.affected += affected
        except BaseException as e:
            logger.error(f"{label} into {table} failed, rolling back: {str(e)}")
            self._rollback()
            raise
        self.adapter.commit_transaction()

        result.elapsed = time.perf_counter() - start
        logger.info(f"{label} of {len(rows)} rows into {table} finished in {result.elapsed:.3f}s "
                    f"({result.statements} statements)")
        if self.dry_run:
            self.query_collector.log_summary()
        return result

    def _write_fitting(self, batch: Sequence[Row], write: Callable[[Sequence[Row]], int]):
        """
        Write a batch, halving it while its statement is too long.

        Returns:
            Tuple of (statements issued, rows affected)
        """
        if isinstance(self.adapter, DryRunAdapter):
            self.adapter.batch_rows = len(batch)
        try:
            return 1, write(batch)
        except StatementTooLongError as e:
            if len(batch) == 1:
                raise ValidationError(
                    f"A single row produces a statement of {e.length} characters, "
                    f"above the limit of {e.limit}"
                ) from e
            middle = len(batch) // 2
            logger.warning(f"Statement of {e.length} characters exceeds {e.limit}, "
                           f"splitting batch of {len(batch)} rows")
            first = self._write_fitting(batch[:middle], write)
            second = self._write_fitting(batch[middle:], write)
            return first[0] + second[0], first[1] + second[1]

    def _rollback(self) -> None:
        try:
            self.adapter.rollback_transaction()
        except Exception as e:
            logger.error(f"Rollback failed: {str(e)}", exc_info=True)
