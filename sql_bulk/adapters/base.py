"""
Base adapter interface for SQL Bulk.

This module defines the abstract base class for execution sinks and the
helper the statement synthesizers use to run statements through one.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from sql_bulk.exceptions import ExecutionError, SQLBulkError

logger = logging.getLogger(__name__)


class SQLAdapter(ABC):
    """
    Abstract base class for SQL Bulk adapters.

    An adapter executes statements against one database connection and
    exposes transaction control. Any object with the same methods can be
    used as an execution sink.
    """

    @abstractmethod
    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> int:
        """
        Execute a SQL statement.

        Args:
            sql: SQL statement to execute
            params: Bound parameters matching the statement's placeholders

        Returns:
            Number of rows affected (0 when the driver does not report it)
        """
        pass

    @abstractmethod
    def get_max_query_size(self) -> Optional[int]:
        """
        Get the maximum statement size in characters.

        Returns:
            Maximum statement size, or None when there is no practical limit
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the connection."""
        pass

    def begin_transaction(self) -> None:
        """
        Begin a transaction.

        Implementations may override this method if they support transactions.
        By default, this method does nothing.
        """
        pass

    def commit_transaction(self) -> None:
        """
        Commit the current transaction.

        Implementations may override this method if they support transactions.
        By default, this method does nothing.
        """
        pass

    def rollback_transaction(self) -> None:
        """
        Rollback the current transaction.

        Implementations may override this method if they support transactions.
        By default, this method does nothing.
        """
        pass


def execute_statement(adapter: Any, sql: str, params: Optional[Sequence[Any]] = None) -> int:
    """
    Run one statement through an execution sink.

    Driver errors are re-raised as ExecutionError with the original exception
    attached as the cause.

    Args:
        adapter: Execution sink
        sql: SQL statement
        params: Bound parameters, if any

    Returns:
        Number of rows affected
    """
    try:
        if params:
            result = adapter.execute(sql, params)
        else:
            result = adapter.execute(sql)
    except SQLBulkError:
        raise
    except Exception as e:
        logger.error(f"Error executing SQL: {str(e)}")
        raise ExecutionError(f"Failed to execute SQL: {str(e)}", cause=e, statement=sql) from e
    return result if isinstance(result, int) and result > 0 else 0
