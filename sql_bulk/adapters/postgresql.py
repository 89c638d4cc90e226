"""
PostgreSQL adapter for SQL Bulk.

This module provides an adapter for PostgreSQL databases built on psycopg2.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import psycopg2
from psycopg2.extensions import (
    ISOLATION_LEVEL_READ_COMMITTED,
    ISOLATION_LEVEL_REPEATABLE_READ,
    ISOLATION_LEVEL_SERIALIZABLE,
)

from sql_bulk.adapters.base import SQLAdapter
from sql_bulk.exceptions import ConfigurationError, ExecutionError

logger = logging.getLogger(__name__)

ISOLATION_LEVELS = {
    "read_committed": ISOLATION_LEVEL_READ_COMMITTED,
    "repeatable_read": ISOLATION_LEVEL_REPEATABLE_READ,
    "serializable": ISOLATION_LEVEL_SERIALIZABLE,
}


class PostgreSQLAdapter(SQLAdapter):
    """
    PostgreSQL adapter for SQL Bulk.

    Use with the "postgresql" dialect, which binds parameters with ``%s``
    and stages updates in temporary tables joined with ``UPDATE ... FROM``.

    Attributes:
        connection: PostgreSQL database connection
        cursor: Cursor used to execute statements
        max_query_size: Maximum statement size in characters
        isolation_level: Transaction isolation level
    """

    def __init__(
        self,
        connection_params: Optional[Dict[str, Any]] = None,
        connection: Optional[Any] = None,
        max_query_size: Optional[int] = None,
        isolation_level: str = "read_committed",
        application_name: Optional[str] = "sql_bulk"
    ):
        """
        Initialize the PostgreSQL adapter.

        Args:
            connection_params: Dictionary of psycopg2 connection parameters (or {"dsn": ...})
            connection: Existing PostgreSQL connection to use (optional)
            max_query_size: Maximum statement size in characters (None for no limit)
            isolation_level: Transaction isolation level
                (read_committed, repeatable_read, serializable)
            application_name: Application name reported to PostgreSQL

        Raises:
            ConfigurationError: If the isolation level is invalid or no
                connection details were given
            ExecutionError: If connecting to PostgreSQL fails
        """
        if isolation_level not in ISOLATION_LEVELS:
            raise ConfigurationError(
                f"Invalid isolation level: {isolation_level}. "
                f"Valid values are: {', '.join(ISOLATION_LEVELS.keys())}"
            )
        self.isolation_level = ISOLATION_LEVELS[isolation_level]
        self.max_query_size = max_query_size

        if connection is None and connection_params is None:
            raise ConfigurationError("Either connection or connection_params must be provided")

        if connection is None:
            conn_params = dict(connection_params)
            if application_name and "application_name" not in conn_params:
                conn_params["application_name"] = application_name
            try:
                self.connection = psycopg2.connect(**conn_params)
            except psycopg2.Error as e:
                raise ExecutionError(f"Failed to connect to PostgreSQL: {str(e)}", cause=e) from e
        else:
            self.connection = connection

        self.connection.set_isolation_level(self.isolation_level)
        self.connection.autocommit = False
        self.cursor = self.connection.cursor()
        self._in_transaction = False

    def get_max_query_size(self) -> Optional[int]:
        return self.max_query_size

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> int:
        """
        Execute a SQL statement.

        Outside an explicit transaction the statement is committed at once.

        Args:
            sql: SQL statement to execute
            params: Bound parameters for ``%s`` placeholders

        Returns:
            Number of rows affected

        Raises:
            ExecutionError: If there's an error executing the statement
        """
        try:
            self.cursor.execute(sql, tuple(params) if params else None)
            if not self._in_transaction:
                self.connection.commit()
            return max(self.cursor.rowcount, 0)
        except psycopg2.Error as e:
            logger.error(f"PostgreSQL error: {str(e)}")
            if not self._in_transaction:
                self.connection.rollback()
            raise ExecutionError(f"Failed to execute PostgreSQL statement: {str(e)}",
                                 cause=e, statement=sql) from e

    def fetch_all(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Tuple]:
        """Run a query and return all result rows."""
        try:
            self.cursor.execute(sql, tuple(params) if params else None)
            return self.cursor.fetchall() if self.cursor.description is not None else []
        except psycopg2.Error as e:
            raise ExecutionError(f"Failed to run PostgreSQL query: {str(e)}", cause=e, statement=sql) from e

    def begin_transaction(self) -> None:
        """
        Begin a transaction.

        psycopg2 opens the transaction implicitly on the next statement.
        """
        self._in_transaction = True

    def commit_transaction(self) -> None:
        """Commit the current transaction."""
        self.connection.commit()
        self._in_transaction = False

    def rollback_transaction(self) -> None:
        """Rollback the current transaction."""
        self.connection.rollback()
        self._in_transaction = False

    def close(self) -> None:
        """Close the cursor and connection."""
        if getattr(self, "cursor", None):
            self.cursor.close()
        if getattr(self, "connection", None):
            self.connection.close()
