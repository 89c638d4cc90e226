"""
Configuration settings for SQL Bulk.

This module contains the default limits, the named dialect presets and the
helpers that load overrides from a JSON file or the environment.
"""
import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Dict, List, Optional

from sql_bulk.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Default dialect limits
DEFAULT_MAX_BOUND_PARAMETERS = 2100
DEFAULT_BATCH_SIZE = 500
DEFAULT_UNION_SEPARATOR = "UNION ALL"
DEFAULT_DIALECT = "generic"

# Environment overrides
ENV_DIALECT = "SQL_BULK_DIALECT"
ENV_BATCH_SIZE = "SQL_BULK_BATCH_SIZE"
ENV_MAX_BOUND_PARAMETERS = "SQL_BULK_MAX_BOUND_PARAMETERS"
ENV_MAX_STATEMENT_LENGTH = "SQL_BULK_MAX_STATEMENT_LENGTH"

ROW_STYLES = ("union_select", "values")
UPDATE_STYLES = ("from_join", "from", "join", "correlated")


def _default_staging_types() -> Dict[str, str]:
    return {"text": "TEXT", "numeric": "NUMERIC", "date": "DATE"}


@dataclass(frozen=True)
class DialectLimits:
    """
    Limits and syntax settings of a target SQL dialect.

    Attributes:
        name: Dialect name
        max_bound_parameters: Maximum number of bound parameters per statement
        max_statement_length: Maximum statement length in characters (None for no limit)
        union_separator: Operator joining literal row selects
        batch_size: Target rows per statement in literal mode
        placeholder: Bound parameter placeholder
        row_style: "union_select" or "values" for literal row lists
        temp_table_prefix: Prefix applied to staging table names
        create_temp_table: Statement prefix creating a session-scoped table
        update_style: Form of the staged UPDATE (see sql_bulk.updater)
        staging_types: SQL types of staged columns, keyed by column type
    """
    name: str = DEFAULT_DIALECT
    max_bound_parameters: int = DEFAULT_MAX_BOUND_PARAMETERS
    max_statement_length: Optional[int] = None
    union_separator: str = DEFAULT_UNION_SEPARATOR
    batch_size: int = DEFAULT_BATCH_SIZE
    placeholder: str = "?"
    row_style: str = "union_select"
    temp_table_prefix: str = ""
    create_temp_table: str = "CREATE TEMPORARY TABLE"
    update_style: str = "correlated"
    staging_types: Dict[str, str] = field(default_factory=_default_staging_types)

    def validate(self) -> "DialectLimits":
        """
        Check the limits for consistency.

        Returns:
            The limits unchanged

        Raises:
            ConfigurationError: If any limit is out of range
        """
        if not isinstance(self.max_bound_parameters, int) or self.max_bound_parameters <= 0:
            raise ConfigurationError(
                f"max_bound_parameters must be a positive integer, got {self.max_bound_parameters!r}"
            )
        if not isinstance(self.batch_size, int) or self.batch_size <= 0:
            raise ConfigurationError(f"batch_size must be a positive integer, got {self.batch_size!r}")
        if self.max_statement_length is not None and (
            not isinstance(self.max_statement_length, int) or self.max_statement_length <= 0
        ):
            raise ConfigurationError(
                f"max_statement_length must be a positive integer or None, got {self.max_statement_length!r}"
            )
        for name in ("union_separator", "placeholder", "row_style", "temp_table_prefix",
                     "create_temp_table", "update_style"):
            if not isinstance(getattr(self, name), str):
                raise ConfigurationError(f"{name} must be a string, got {getattr(self, name)!r}")
        if not self.union_separator.strip():
            raise ConfigurationError("union_separator must not be empty")
        if not self.placeholder.strip():
            raise ConfigurationError("placeholder must not be empty")
        if self.row_style not in ROW_STYLES:
            raise ConfigurationError(
                f"Invalid row_style: {self.row_style}. Valid values are: {', '.join(ROW_STYLES)}"
            )
        if self.update_style not in UPDATE_STYLES:
            raise ConfigurationError(
                f"Invalid update_style: {self.update_style}. Valid values are: {', '.join(UPDATE_STYLES)}"
            )
        if not isinstance(self.staging_types, dict):
            raise ConfigurationError(f"staging_types must be a mapping, got {self.staging_types!r}")
        for column_type in ("text", "numeric", "date"):
            sql_type = self.staging_types.get(column_type)
            if not isinstance(sql_type, str) or not sql_type.strip():
                raise ConfigurationError(
                    f"staging_types must map {column_type!r} to a SQL type, got {sql_type!r}"
                )
        return self

    def with_overrides(self, **overrides: Any) -> "DialectLimits":
        """Return a copy with the given fields replaced and validated."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigurationError(f"Unknown dialect settings: {', '.join(sorted(unknown))}")
        if "staging_types" in overrides:
            if not isinstance(overrides["staging_types"], dict):
                raise ConfigurationError(
                    f"staging_types must be a mapping, got {overrides['staging_types']!r}"
                )
            overrides["staging_types"] = {**self.staging_types, **overrides["staging_types"]}
        return replace(self, **overrides).validate()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


DIALECTS: Dict[str, DialectLimits] = {
    "generic": DialectLimits(),
    "sqlserver": DialectLimits(
        name="sqlserver",
        max_bound_parameters=2100,
        temp_table_prefix="#",
        create_temp_table="CREATE TABLE",
        update_style="from_join",
        staging_types={"text": "NVARCHAR(MAX)", "numeric": "DECIMAL(38, 10)", "date": "DATE"},
    ),
    # A UNION of quoted literals resolves to text, which PostgreSQL will not
    # assign to DATE or NUMERIC columns; VALUES rows take the target types
    "postgresql": DialectLimits(
        name="postgresql",
        max_bound_parameters=65535,
        placeholder="%s",
        row_style="values",
        update_style="from",
    ),
    # Compound SELECTs are capped at 500 terms in SQLite; VALUES lists are not
    "sqlite": DialectLimits(
        name="sqlite",
        max_bound_parameters=32766,
        max_statement_length=1_000_000_000,
        row_style="values",
        update_style="correlated",
        staging_types={"text": "TEXT", "numeric": "NUMERIC", "date": "TEXT"},
    ),
    # Matches the default max_allowed_packet of 64MB
    "mysql": DialectLimits(
        name="mysql",
        max_bound_parameters=65535,
        max_statement_length=67_108_864,
        placeholder="%s",
        update_style="join",
        staging_types={"text": "LONGTEXT", "numeric": "DECIMAL(38, 10)", "date": "DATE"},
    ),
}


def available_dialects() -> List[str]:
    """Names of the built-in dialect presets."""
    return sorted(DIALECTS)


def get_dialect(name: str) -> DialectLimits:
    """
    Look up a dialect preset by name.

    Args:
        name: Dialect name (case-insensitive)

    Returns:
        The dialect limits

    Raises:
        ConfigurationError: If the dialect is unknown
    """
    try:
        return DIALECTS[name.lower()]
    except (KeyError, AttributeError):
        raise ConfigurationError(
            f"Unknown dialect: {name}. Valid values are: {', '.join(available_dialects())}"
        ) from None


def load_limits(config_file: str, dialect: Optional[str] = None) -> DialectLimits:
    """
    Load dialect limits from a JSON configuration file.

    The file holds an optional "dialect" key naming the base preset and any
    DialectLimits field as an override, e.g.::

        {"dialect": "sqlserver", "batch_size": 250}

    Args:
        config_file: Path to the JSON file
        dialect: Base dialect, overriding the one named in the file

    Returns:
        The resulting dialect limits

    Raises:
        ConfigurationError: If the file cannot be read or holds invalid settings
    """
    try:
        with open(config_file, "r") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Error loading configuration from {config_file}: {str(e)}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration in {config_file} must be a JSON object")

    base_name = dialect or data.pop("dialect", DEFAULT_DIALECT)
    data.pop("dialect", None)
    limits = get_dialect(base_name).with_overrides(**data)
    logger.debug(f"Loaded {limits.name} limits from {config_file}")
    return limits


def _env_int(name: str) -> Optional[int]:
    value = os.environ.get(name)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from None


def limits_from_env(base: Optional[DialectLimits] = None) -> DialectLimits:
    """
    Apply environment overrides to a set of limits.

    Reads SQL_BULK_DIALECT (used only when no base is given),
    SQL_BULK_BATCH_SIZE, SQL_BULK_MAX_BOUND_PARAMETERS and
    SQL_BULK_MAX_STATEMENT_LENGTH.
    """
    if base is None:
        base = get_dialect(os.environ.get(ENV_DIALECT, DEFAULT_DIALECT))

    overrides: Dict[str, Any] = {}
    batch_size = _env_int(ENV_BATCH_SIZE)
    if batch_size is not None:
        overrides["batch_size"] = batch_size
    max_params = _env_int(ENV_MAX_BOUND_PARAMETERS)
    if max_params is not None:
        overrides["max_bound_parameters"] = max_params
    max_length = _env_int(ENV_MAX_STATEMENT_LENGTH)
    if max_length is not None:
        overrides["max_statement_length"] = max_length

    if overrides:
        logger.debug(f"Applying environment overrides: {overrides}")
        return base.with_overrides(**overrides)
    return base
