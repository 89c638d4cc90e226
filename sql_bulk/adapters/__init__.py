"""
SQL Bulk adapters for specific database engines.

This package provides the execution sinks used by BulkWriter.
"""

from sql_bulk.adapters.base import SQLAdapter, execute_statement
from sql_bulk.adapters.dry_run import DryRunAdapter
from sql_bulk.adapters.generic import GenericAdapter

__all__ = ["SQLAdapter", "DryRunAdapter", "GenericAdapter", "execute_statement"]
