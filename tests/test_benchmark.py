"""
Tests for the benchmark harness.
"""
import sqlite3

import pytest
from rich.console import Console

from sql_bulk.adapters.generic import GenericAdapter
from sql_bulk.benchmark import (
    COLUMNS,
    BenchmarkResult,
    generate_employees,
    generate_salary_updates,
    render_results,
    run_benchmark,
)
from sql_bulk.config import get_dialect


def test_generate_employees_is_reproducible():
    rows = generate_employees(50, seed=1)
    assert rows == generate_employees(50, seed=1)
    assert len(rows) == 50
    assert all(len(row) == len(COLUMNS) for row in rows)
    assert rows[0][0] == "000001"
    assert len({row[0] for row in rows}) == 50


def test_salary_updates_cover_every_row():
    rows = generate_employees(20)
    updates = generate_salary_updates(rows)
    assert [key for key, _ in updates] == [row[0] for row in rows]


@pytest.mark.db
def test_run_benchmark_on_sqlite():
    conn = sqlite3.connect(":memory:")
    adapter = GenericAdapter(conn)
    try:
        results = run_benchmark(adapter, get_dialect("sqlite").with_overrides(batch_size=40), 100)
    finally:
        adapter.close()
        conn.close()

    assert [r.name for r in results] == [
        "Row-by-row INSERT", "Batched INSERT", "Row-by-row UPDATE", "Staged bulk UPDATE",
    ]
    assert [r.statements for r in results] == [100, 3, 100, 3]
    assert all(r.rows == 100 for r in results)
    assert all(r.peak_memory_bytes > 0 for r in results)


def test_render_results():
    console = Console(record=True, width=160)
    results = [
        BenchmarkResult("Row-by-row INSERT", "insert", 100, 100, 2.0, 1024),
        BenchmarkResult("Batched INSERT", "insert", 100, 1, 0.5, 2048),
    ]
    render_results(results, console)
    output = console.export_text()
    assert "Bulk write benchmark" in output
    assert "4.00x" in output
    assert "1.00x" in output
    assert "2.00 KB" in output
