"""
Utility functions for SQL Bulk.
"""
import logging
import sys
from typing import List, Optional, Tuple

from sql_bulk.exceptions import ConfigurationError
from sql_bulk.models import ColumnSpec, ColumnType

LOGGER_NAME = "sql_bulk"


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> logging.Logger:
    """
    Set up logging for the sql_bulk package.

    Args:
        verbose: Log debug messages to the console
        log_file: Optional file that receives debug output

    Returns:
        Logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        )
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def parse_column_list(value: str, default_type: str = "text") -> Tuple[ColumnSpec, ...]:
    """
    Parse a comma separated column list such as "id,salary:numeric,hired:date".

    Args:
        value: Column list
        default_type: Type of columns given without one

    Returns:
        Tuple of column specs

    Raises:
        ConfigurationError: If a column type is unknown
    """
    specs: List[ColumnSpec] = []
    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        name, _, column_type = item.partition(":")
        try:
            specs.append(ColumnSpec(name.strip(), ColumnType((column_type or default_type).strip().lower())))
        except ValueError:
            raise ConfigurationError(
                f"Unknown column type in {item!r}. Valid values are: "
                f"{', '.join(t.value for t in ColumnType)}"
            ) from None
    return tuple(specs)


def format_size(size_bytes: float) -> str:
    """Format size in bytes to human-readable string."""
    for unit in ["B", "KB", "MB", "GB"]:
        if size_bytes < 1024:
            return f"{size_bytes:.2f} {unit}"
        size_bytes /= 1024
    return f"{size_bytes:.2f} TB"
