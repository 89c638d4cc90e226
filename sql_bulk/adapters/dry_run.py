"""
Dry run adapter for SQL Bulk.

Records statements in a QueryCollector instead of executing them.
"""
import logging
import re
from typing import Any, Optional, Sequence, Set

from sql_bulk.adapters.base import SQLAdapter
from sql_bulk.query_collector import QueryCollector

logger = logging.getLogger(__name__)

_TABLE_RE = re.compile(
    r"^\s*(?:INSERT\s+INTO|UPDATE|DROP\s+TABLE|CREATE\s+(?:TEMPORARY\s+|TEMP\s+)?TABLE)\s+([^\s(]+)",
    re.IGNORECASE,
)
# UPDATE alias SET ... FROM table AS alias
_UPDATE_ALIAS_RE = re.compile(
    r"^\s*UPDATE\s+(\w+)\s+SET\s.*?\sFROM\s+([^\s(]+)\s+AS\s+\1\b",
    re.IGNORECASE | re.DOTALL,
)
_DDL_KEYWORDS = ("CREATE", "DROP", "ALTER", "TRUNCATE")


def table_name_of(sql: str) -> Optional[str]:
    """The table a statement creates, drops or writes to, if recognised."""
    match = _UPDATE_ALIAS_RE.match(sql)
    if match:
        return match.group(2)
    match = _TABLE_RE.match(sql)
    return match.group(1) if match else None


class DryRunAdapter(SQLAdapter):
    """
    Execution sink that collects statements instead of running them.

    ``batch_rows`` is set by the writer before each batch so that DML
    statements are recorded with the number of rows they would write.
    Writes into tables created during the dry run (staging tables) are
    recorded with a row count of 0.
    """

    def __init__(self, query_collector: Optional[QueryCollector] = None,
                 max_query_size: Optional[int] = None):
        self.query_collector = query_collector if query_collector is not None else QueryCollector()
        self._max_query_size = max_query_size
        self._scratch_tables: Set[str] = set()
        self.batch_rows = 0

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> int:
        keyword = sql.lstrip().split(None, 1)[0].upper() if sql.strip() else ""
        query_type = "DDL" if keyword in _DDL_KEYWORDS else "DML"
        table_name = table_name_of(sql)

        if keyword == "CREATE" and table_name:
            self._scratch_tables.add(table_name)
        elif keyword == "DROP":
            self._scratch_tables.discard(table_name)

        if query_type == "DML" and table_name not in self._scratch_tables:
            row_count = self.batch_rows
        else:
            row_count = 0

        logger.info(f"[DRY RUN] {query_type} on {table_name} ({len(sql)} chars)")
        self.query_collector.add_query(sql, query_type, row_count, table_name, params)
        return row_count

    def get_max_query_size(self) -> Optional[int]:
        return self._max_query_size

    def close(self) -> None:
        pass
