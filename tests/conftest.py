"""
Pytest configuration and fixtures for SQL Bulk tests.
"""
import os
import sqlite3

import pytest
from unittest.mock import MagicMock

from sql_bulk.adapters.generic import GenericAdapter


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "core: tests that don't require database connections"
    )
    config.addinivalue_line(
        "markers", "db: tests that run against an in-memory SQLite database"
    )
    config.addinivalue_line(
        "markers", "postgres: tests that require PostgreSQL database connections"
    )


def postgres_params():
    """PostgreSQL connection parameters from the environment."""
    return {
        "host": os.environ.get("PGHOST", "localhost"),
        "port": os.environ.get("PGPORT", "5432"),
        "user": os.environ.get("PGUSER", "postgres"),
        "dbname": os.environ.get("PGDATABASE", "postgres"),
        "password": os.environ.get("PGPASSWORD", ""),
        "connect_timeout": 5,
    }


def has_postgres_connection():
    """Check if PostgreSQL connection is available."""
    required_vars = ["PGHOST", "PGPORT", "PGUSER", "PGDATABASE"]
    for var in required_vars:
        if not os.environ.get(var):
            return False

    try:
        import psycopg2
        conn = psycopg2.connect(**postgres_params())
        conn.close()
        return True
    except Exception:
        return False


def pytest_collection_modifyitems(config, items):
    """Skip PostgreSQL tests when no server is reachable."""
    if not any("postgres" in item.keywords for item in items):
        return
    if has_postgres_connection():
        return
    skip_postgres = pytest.mark.skip(reason="PostgreSQL connection not available")
    for item in items:
        if "postgres" in item.keywords:
            item.add_marker(skip_postgres)


@pytest.fixture
def mock_db_connection():
    """Mock DB-API connection for adapter tests."""
    conn = MagicMock(spec=["cursor", "commit", "rollback", "close"])
    cursor = MagicMock()
    conn.cursor.return_value = cursor
    cursor.rowcount = 1
    cursor.description = None
    return conn


@pytest.fixture
def sqlite_connection():
    """In-memory SQLite database with an employees table."""
    conn = sqlite3.connect(":memory:")
    conn.execute(
        "CREATE TABLE employees ("
        "id TEXT PRIMARY KEY, name TEXT, contract TEXT, salary NUMERIC, hire_date TEXT)"
    )
    conn.commit()
    yield conn
    conn.close()


@pytest.fixture
def sqlite_adapter(sqlite_connection):
    """GenericAdapter over the in-memory SQLite database."""
    adapter = GenericAdapter(connection=sqlite_connection)
    yield adapter
    adapter.close()


@pytest.fixture
def staging_tables():
    """Return a function listing staging tables left in a SQLite connection."""
    def list_tables(conn):
        rows = conn.execute(
            "SELECT name FROM sqlite_temp_master WHERE type = 'table' AND name LIKE 'stg%'"
        ).fetchall()
        return [row[0] for row in rows]
    return list_tables


@pytest.fixture
def pg_params():
    """PostgreSQL connection parameters for postgres-marked tests."""
    return postgres_params()
