"""
Benchmark comparing row-by-row writes with batched writes.

Four cases run against the same table: row-by-row INSERT, batched INSERT,
row-by-row UPDATE and staged bulk UPDATE. Each case reports its wall clock
time and peak Python memory.
"""
import datetime
import logging
import random
import time
import tracemalloc
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from rich.console import Console
from rich.table import Table

from sql_bulk.adapters.base import execute_statement
from sql_bulk.config import DialectLimits
from sql_bulk.models import ColumnSpec, ColumnType, EncodingMode, Row
from sql_bulk.utils import format_size
from sql_bulk.writer import BulkWriter

logger = logging.getLogger(__name__)

TABLE_NAME = "bench_employees"
COLUMNS = (
    ColumnSpec("id", ColumnType.TEXT),
    ColumnSpec("name", ColumnType.TEXT),
    ColumnSpec("contract", ColumnType.TEXT),
    ColumnSpec("salary", ColumnType.NUMERIC),
    ColumnSpec("hire_date", ColumnType.DATE),
)
CONTRACT_TYPES = ("CDI", "CDD", "Interim", "Stage")
LAST_NAMES = ("Martin", "O'Brien", "Dupont", "Wu", "D'Angelo", "Nguyen", "Garcia", "Smith")
FIRST_NAMES = ("Alice", "Bob", "Chloé", "Dmitri", "Emma", "Farid", "Grace", "Hugo")


@dataclass
class BenchmarkResult:
    """Result of a single benchmark case."""
    name: str
    operation: str
    rows: int
    statements: int
    duration_seconds: float
    peak_memory_bytes: int

    @property
    def rows_per_second(self) -> float:
        return self.rows / self.duration_seconds if self.duration_seconds else 0.0


def generate_employees(num_rows: int, seed: int = 42) -> List[Row]:
    """Generate reproducible employee rows matching COLUMNS."""
    rng = random.Random(seed)
    start = datetime.date(2000, 1, 1)
    rows = []
    for i in range(num_rows):
        name = f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}"
        # Some rows deliberately carry missing values
        contract = rng.choice(CONTRACT_TYPES) if rng.random() > 0.05 else None
        salary = round(rng.uniform(20_000, 90_000), 2)
        hire_date = start + datetime.timedelta(days=rng.randint(0, 9000))
        rows.append((f"{i + 1:06d}", name, contract, salary, hire_date.isoformat()))
    return rows


def generate_salary_updates(rows: Sequence[Row], seed: int = 7) -> List[Row]:
    """Generate (id, new salary) pairs for every row."""
    rng = random.Random(seed)
    return [(row[0], round(row[3] * rng.uniform(1.0, 1.1), 2)) for row in rows]


def create_table(adapter: Any, limits: DialectLimits) -> None:
    """Drop and recreate the benchmark table."""
    execute_statement(adapter, f"DROP TABLE IF EXISTS {TABLE_NAME}")
    execute_statement(adapter, f"""
        CREATE TABLE {TABLE_NAME} (
            id VARCHAR(16) PRIMARY KEY,
            name VARCHAR(255),
            contract VARCHAR(32),
            salary NUMERIC(12, 2),
            hire_date {limits.staging_types['date']}
        )
    """)


def _measure(name: str, operation: str, rows: int, action) -> BenchmarkResult:
    tracemalloc.start()
    start = time.perf_counter()
    try:
        statements = action()
        duration = time.perf_counter() - start
        _, peak = tracemalloc.get_traced_memory()
    finally:
        tracemalloc.stop()
    logger.info(f"{name}: {rows} rows in {duration:.3f}s")
    return BenchmarkResult(name, operation, rows, statements, duration, peak)


def insert_row_by_row(adapter: Any, limits: DialectLimits, rows: Sequence[Row]) -> int:
    """Insert each row with its own statement inside one transaction."""
    placeholders = ", ".join([limits.placeholder] * len(COLUMNS))
    column_list = ", ".join(column.name for column in COLUMNS)
    sql = f"INSERT INTO {TABLE_NAME} ({column_list}) VALUES ({placeholders})"
    adapter.begin_transaction()
    try:
        for row in rows:
            execute_statement(adapter, sql, row)
    except BaseException:
        adapter.rollback_transaction()
        raise
    adapter.commit_transaction()
    return len(rows)


def update_row_by_row(adapter: Any, limits: DialectLimits, updates: Sequence[Row]) -> int:
    """Update each row with its own statement inside one transaction."""
    sql = f"UPDATE {TABLE_NAME} SET salary = {limits.placeholder} WHERE id = {limits.placeholder}"
    adapter.begin_transaction()
    try:
        for key, salary in updates:
            execute_statement(adapter, sql, (salary, key))
    except BaseException:
        adapter.rollback_transaction()
        raise
    adapter.commit_transaction()
    return len(updates)


def run_benchmark(adapter: Any, limits: DialectLimits, num_rows: int,
                  batch_size: Optional[int] = None, seed: int = 42) -> List[BenchmarkResult]:
    """
    Run the four benchmark cases.

    Args:
        adapter: Execution sink connected to the benchmark database
        limits: Dialect limits
        num_rows: Number of synthetic rows
        batch_size: Rows per literal statement (defaults to limits.batch_size)
        seed: Seed for the synthetic data

    Returns:
        One result per case, in run order
    """
    rows = generate_employees(num_rows, seed)
    updates = generate_salary_updates(rows)
    writer = BulkWriter(adapter, limits, EncodingMode.LITERAL_VALUES, batch_size=batch_size)
    results = []

    create_table(adapter, limits)
    results.append(_measure("Row-by-row INSERT", "insert", len(rows),
                            lambda: insert_row_by_row(adapter, limits, rows)))

    create_table(adapter, limits)
    results.append(_measure("Batched INSERT", "insert", len(rows),
                            lambda: writer.insert_rows(TABLE_NAME, COLUMNS, rows).statements))

    results.append(_measure("Row-by-row UPDATE", "update", len(updates),
                            lambda: update_row_by_row(adapter, limits, updates)))

    results.append(_measure("Staged bulk UPDATE", "update", len(updates),
                            lambda: writer.update_rows(TABLE_NAME, COLUMNS[0], [COLUMNS[3]], updates).statements))

    execute_statement(adapter, f"DROP TABLE IF EXISTS {TABLE_NAME}")
    return results


def render_results(results: Sequence[BenchmarkResult], console: Optional[Console] = None) -> Table:
    """
    Print the results as a table.

    The speedup column compares each case with the first case of the same
    operation.
    """
    table = Table(title="Bulk write benchmark")
    table.add_column("Case")
    table.add_column("Rows", justify="right")
    table.add_column("Statements", justify="right")
    table.add_column("Time (s)", justify="right")
    table.add_column("Rows/sec", justify="right")
    table.add_column("Peak memory", justify="right")
    table.add_column("Speedup", justify="right")

    baselines = {}
    for result in results:
        baseline = baselines.setdefault(result.operation, result)
        speedup = baseline.duration_seconds / result.duration_seconds if result.duration_seconds else 0.0
        table.add_row(
            result.name,
            f"{result.rows:,}",
            f"{result.statements:,}",
            f"{result.duration_seconds:.3f}",
            f"{result.rows_per_second:,.0f}",
            format_size(result.peak_memory_bytes),
            f"{speedup:.2f}x",
        )

    (console or Console()).print(table)
    return table
