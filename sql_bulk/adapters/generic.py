"""
Generic adapter for SQL Bulk.

This module provides an adapter that works with any database driver that
follows the Python DB-API 2.0 specification.
"""
import logging
from typing import Any, Callable, List, Optional, Sequence, Tuple

from sql_bulk.adapters.base import SQLAdapter
from sql_bulk.exceptions import ExecutionError

logger = logging.getLogger(__name__)


class GenericAdapter(SQLAdapter):
    """
    Generic adapter for connecting SQL Bulk to any DB-API compatible database.

    Outside of an explicit transaction each statement is committed when
    ``auto_commit`` is set; inside one, commits are left to
    ``commit_transaction``.

    Example:
        >>> import sqlite3
        >>> from sql_bulk import BulkWriter
        >>> from sql_bulk.config import get_dialect
        >>> conn = sqlite3.connect(":memory:")
        >>> adapter = GenericAdapter(connection=conn)
        >>> adapter.execute("CREATE TABLE users (id INTEGER, name TEXT)")
        0
        >>> writer = BulkWriter(adapter, get_dialect("sqlite"))
        >>> writer.insert_rows("users", ["id", "name"], [(1, "Alice"), (2, "Bob")]).rows
        2
    """

    def __init__(
        self,
        connection: Any,
        create_cursor_fn: Optional[Callable] = None,
        max_query_size: Optional[int] = None,
        auto_commit: bool = True
    ):
        """
        Initialize a generic DB-API adapter.

        Args:
            connection: A DB-API compatible connection object
            create_cursor_fn: Optional function to create a cursor (defaults to connection.cursor())
            max_query_size: Maximum statement size in characters (None for no limit)
            auto_commit: Whether to commit after each statement outside a transaction
        """
        self.connection = connection
        self.create_cursor_fn = create_cursor_fn or (lambda conn: conn.cursor())
        self._max_query_size = max_query_size
        self.auto_commit = auto_commit
        self._cursor = None
        self._in_transaction = False

        logger.debug(f"Initialized GenericAdapter with max_query_size={max_query_size}")

    @property
    def in_transaction(self) -> bool:
        return self._in_transaction

    def _get_cursor(self) -> Any:
        """Get a cursor, creating it if necessary."""
        if self._cursor is None:
            self._cursor = self.create_cursor_fn(self.connection)
        return self._cursor

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> int:
        """
        Execute a SQL statement using the DB-API connection.

        Args:
            sql: The SQL statement to execute
            params: Bound parameters, if any

        Returns:
            Number of rows affected (0 when the driver reports none)

        Raises:
            ExecutionError: If the driver raises
        """
        cursor = self._get_cursor()

        try:
            logger.debug(f"Executing SQL ({len(sql)} chars)")
            if params:
                cursor.execute(sql, tuple(params))
            else:
                cursor.execute(sql)

            if self.auto_commit and not self._in_transaction and hasattr(self.connection, "commit"):
                self.connection.commit()

            rowcount = getattr(cursor, "rowcount", -1)
            return rowcount if isinstance(rowcount, int) and rowcount > 0 else 0
        except Exception as e:
            logger.error(f"Error executing SQL: {str(e)}", exc_info=True)
            raise ExecutionError(f"Failed to execute SQL: {str(e)}", cause=e, statement=sql) from e

    def fetch_all(self, sql: str, params: Optional[Sequence[Any]] = None) -> List[Tuple]:
        """
        Run a query and return all result rows.

        Args:
            sql: Query to run
            params: Bound parameters, if any

        Returns:
            List of result rows
        """
        cursor = self._get_cursor()
        try:
            if params:
                cursor.execute(sql, tuple(params))
            else:
                cursor.execute(sql)
            return cursor.fetchall() if cursor.description else []
        except Exception as e:
            raise ExecutionError(f"Failed to run query: {str(e)}", cause=e, statement=sql) from e

    def get_max_query_size(self) -> Optional[int]:
        """
        Get the maximum statement size in characters.

        Returns:
            Maximum statement size, or None for no limit
        """
        return self._max_query_size

    def close(self) -> None:
        """Close the cursor."""
        if self._cursor:
            self._cursor.close()
            self._cursor = None

        logger.debug("Closed DB cursor")

    def begin_transaction(self) -> None:
        """Begin a database transaction."""
        if self._in_transaction:
            return
        if hasattr(self.connection, "begin"):
            self.connection.begin()
        elif hasattr(self.connection, "execute") and not getattr(self.connection, "in_transaction", False):
            # sqlite3 only opens a transaction implicitly before DML
            self.connection.execute("BEGIN TRANSACTION")
        self._in_transaction = True

    def commit_transaction(self) -> None:
        """Commit the current database transaction."""
        if hasattr(self.connection, "commit"):
            self.connection.commit()
        self._in_transaction = False

    def rollback_transaction(self) -> None:
        """Rollback the current database transaction."""
        if hasattr(self.connection, "rollback"):
            self.connection.rollback()
        self._in_transaction = False
