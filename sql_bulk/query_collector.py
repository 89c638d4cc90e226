"""
Query collector for dry run mode.

Statements that would be executed are recorded here instead, so a run can
be inspected without touching the database.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

SAMPLE_LENGTH = 200


class QueryCollector:
    """
    Collects statements during dry run mode instead of executing them.

    Example:
        >>> from sql_bulk import BulkWriter, QueryCollector
        >>> collector = QueryCollector()
        >>> writer = BulkWriter(None, dry_run=True, query_collector=collector)
        >>> writer.insert_rows("users", ["id", "name"], [(1, "Alice"), (2, "Bob")])
        >>> collector.get_stats()["total_row_count"]
        2
    """

    def __init__(self):
        """Initialize a new query collector."""
        self.queries: List[Dict[str, Any]] = []
        self.total_row_count = 0

    def add_query(self, query: str, query_type: str = "DML", row_count: int = 0,
                  table_name: Optional[str] = None,
                  params: Optional[Sequence[Any]] = None) -> None:
        """
        Add a query to the collector.

        Args:
            query: SQL statement
            query_type: Type of statement (DDL or DML)
            row_count: Number of rows the statement writes
            table_name: Target table name
            params: Bound parameters, if any
        """
        query_type = query_type.upper()
        if query_type == "DDL":
            row_count = 0
        self.queries.append({
            "query": query,
            "type": query_type,
            "row_count": row_count,
            "table_name": table_name or "unknown",
            "params": tuple(params) if params else (),
        })
        self.total_row_count += row_count
        logger.debug(f"Added query to collector: {query_type} on {table_name} ({row_count} rows)")

    def clear(self) -> None:
        """Clear all collected queries."""
        self.queries = []
        self.total_row_count = 0

    def get_queries(self) -> List[Dict[str, Any]]:
        return list(self.queries)

    def get_queries_by_table(self, table_name: str) -> List[Dict[str, Any]]:
        """
        Get all queries for a specific table.

        Args:
            table_name: Table name to filter by

        Returns:
            List of query dictionaries for the specified table
        """
        return [q for q in self.queries if q["table_name"] == table_name]

    def get_queries_by_type(self, query_type: str) -> List[Dict[str, Any]]:
        """
        Get all queries of a specific type.

        Args:
            query_type: Query type to filter by (DDL or DML)

        Returns:
            List of query dictionaries of that type
        """
        return [q for q in self.queries if q["type"] == query_type.upper()]

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the collected queries.

        Returns:
            Dictionary with query counts by table and type and the total row count
        """
        tables = set(q["table_name"] for q in self.queries)
        types = set(q["type"] for q in self.queries)

        return {
            "total_queries": len(self.queries),
            "total_row_count": self.total_row_count,
            "tables": {table: len(self.get_queries_by_table(table)) for table in tables},
            "query_types": {qtype: len(self.get_queries_by_type(qtype)) for qtype in types},
        }

    def log_summary(self) -> None:
        """Log a summary of the collected queries."""
        stats = self.get_stats()
        logger.info("=== DRY RUN SUMMARY ===")
        logger.info(f"Total statements: {stats['total_queries']}")
        for qtype, count in sorted(stats["query_types"].items()):
            logger.info(f"{qtype} statements: {count}")
        logger.info(f"Would write approximately {self.total_row_count} rows")

        dml = self.get_queries_by_type("DML")
        if dml:
            sample = dml[0]["query"]
            if len(sample) > SAMPLE_LENGTH:
                sample = sample[:SAMPLE_LENGTH] + "..."
            logger.info("Sample DML:")
            logger.info(sample)
