"""
Exception types raised by SQL Bulk.

Configuration problems and malformed batches are detected before any
statement is issued; execution failures wrap the underlying driver error.
"""
from typing import Optional


class SQLBulkError(Exception):
    """Base class for all SQL Bulk errors."""


class ConfigurationError(SQLBulkError):
    """Invalid dialect limits, column count or configuration file."""


class ValidationError(SQLBulkError):
    """Malformed batch shape or unsafe identifier. No statement was issued."""


class ExecutionError(SQLBulkError):
    """
    An execution sink call failed.

    Attributes:
        cause: The underlying exception raised by the driver or adapter
        statement: The SQL statement that failed, if known
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None,
                 statement: Optional[str] = None):
        super().__init__(message)
        self.cause = cause
        self.statement = statement


class StatementTooLongError(ValidationError):
    """A generated statement exceeds the dialect's statement length limit."""

    def __init__(self, message: str, length: int, limit: int):
        super().__init__(message)
        self.length = length
        self.limit = limit
