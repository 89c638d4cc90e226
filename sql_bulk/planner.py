"""
Batch planning.

The planner decides how many rows go into one statement and partitions a
row count into contiguous batch ranges.
"""
import logging
from typing import Iterator, Optional, Sequence

from sql_bulk.config import DialectLimits
from sql_bulk.exceptions import ConfigurationError
from sql_bulk.models import BatchRange, EncodingMode, Row

logger = logging.getLogger(__name__)


def batch_size_for(column_count: int, limits: DialectLimits, mode: EncodingMode,
                   target_size: Optional[int] = None) -> int:
    """
    Compute the number of rows per batch.

    With bound parameters every field uses one parameter, so the batch size
    is the parameter ceiling divided by the column count (at least 1).
    Literal statements have no parameter ceiling and use the target size.

    Args:
        column_count: Number of columns per row
        limits: Dialect limits
        mode: Encoding mode
        target_size: Rows per batch in literal mode (defaults to limits.batch_size)

    Returns:
        Rows per batch

    Raises:
        ConfigurationError: If the column count or limits are invalid
    """
    if not isinstance(column_count, int) or column_count <= 0:
        raise ConfigurationError(f"column_count must be a positive integer, got {column_count!r}")
    limits.validate()
    mode = EncodingMode(mode)

    if mode == EncodingMode.BOUND_PARAMETERS:
        return max(1, limits.max_bound_parameters // column_count)

    size = limits.batch_size if target_size is None else target_size
    if not isinstance(size, int) or size <= 0:
        raise ConfigurationError(f"batch size must be a positive integer, got {size!r}")
    return size


class BatchPlan:
    """
    Contiguous batch ranges covering [0, total_rows).

    The plan is lazy and can be iterated any number of times; each
    iteration yields the same ranges in order.
    """

    def __init__(self, total_rows: int, batch_size: int):
        self.total_rows = total_rows
        self.batch_size = batch_size

    def __iter__(self) -> Iterator[BatchRange]:
        for index, start in enumerate(range(0, self.total_rows, self.batch_size)):
            yield BatchRange(index, start, min(start + self.batch_size, self.total_rows))

    def __len__(self) -> int:
        return -(-self.total_rows // self.batch_size)

    def __repr__(self) -> str:
        return f"BatchPlan(total_rows={self.total_rows}, batch_size={self.batch_size}, batches={len(self)})"

    def batches(self, rows: Sequence[Row]) -> Iterator[Sequence[Row]]:
        """Yield the row slices of each batch."""
        if len(rows) != self.total_rows:
            raise ConfigurationError(
                f"Plan covers {self.total_rows} rows but {len(rows)} were given"
            )
        for batch_range in self:
            yield rows[batch_range.start:batch_range.stop]


def plan(total_rows: int, column_count: int, limits: DialectLimits,
         mode: EncodingMode = EncodingMode.LITERAL_VALUES,
         target_size: Optional[int] = None) -> BatchPlan:
    """
    Plan the batches for a run.

    Args:
        total_rows: Number of rows to write
        column_count: Number of columns per row
        limits: Dialect limits
        mode: Encoding mode
        target_size: Rows per batch in literal mode (defaults to limits.batch_size)

    Returns:
        A restartable BatchPlan

    Raises:
        ConfigurationError: If any argument is out of range
    """
    if not isinstance(total_rows, int) or total_rows < 0:
        raise ConfigurationError(f"total_rows must be a non-negative integer, got {total_rows!r}")
    size = batch_size_for(column_count, limits, mode, target_size)
    batch_plan = BatchPlan(total_rows, size)
    logger.debug(f"Planned {batch_plan!r} for {column_count} columns in {EncodingMode(mode).value} mode")
    return batch_plan
