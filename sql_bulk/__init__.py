"""
SQL Bulk - batch statement synthesis for bulk inserts and updates

This package turns a list of rows into as few SQL statements as a target
dialect allows: multi-row INSERTs sized to the dialect's bound-parameter and
statement length limits, and set-based UPDATEs applied through a temporary
staging table.
"""

__version__ = "0.1.0"

from sql_bulk.builder import BulkInsertBuilder, InsertStatement
from sql_bulk.config import DialectLimits, get_dialect, load_limits
from sql_bulk.encoder import encode_numeric, encode_text, is_numeric
from sql_bulk.exceptions import (
    ConfigurationError,
    ExecutionError,
    SQLBulkError,
    StatementTooLongError,
    ValidationError,
)
from sql_bulk.models import BatchRange, ColumnSpec, ColumnType, EncodingMode
from sql_bulk.planner import BatchPlan, plan
from sql_bulk.query_collector import QueryCollector
from sql_bulk.updater import StagedBulkUpdater
from sql_bulk.writer import BulkWriter, WriteResult

__all__ = [
    "BatchPlan",
    "BatchRange",
    "BulkInsertBuilder",
    "BulkWriter",
    "ColumnSpec",
    "ColumnType",
    "ConfigurationError",
    "DialectLimits",
    "EncodingMode",
    "ExecutionError",
    "InsertStatement",
    "QueryCollector",
    "SQLBulkError",
    "StagedBulkUpdater",
    "StatementTooLongError",
    "ValidationError",
    "WriteResult",
    "encode_numeric",
    "encode_text",
    "get_dialect",
    "is_numeric",
    "load_limits",
    "plan",
]
