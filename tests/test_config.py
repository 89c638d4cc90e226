"""
Tests for dialect configuration.
"""
import json
import os
import tempfile
import unittest
from unittest import mock

from sql_bulk.builder import BulkInsertBuilder
from sql_bulk.config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_MAX_BOUND_PARAMETERS,
    DEFAULT_UNION_SEPARATOR,
    DialectLimits,
    available_dialects,
    get_dialect,
    limits_from_env,
    load_limits,
)
from sql_bulk.exceptions import ConfigurationError


class TestDialectLimits(unittest.TestCase):

    def test_defaults(self):
        limits = DialectLimits()
        self.assertEqual(limits.max_bound_parameters, DEFAULT_MAX_BOUND_PARAMETERS)
        self.assertEqual(limits.max_bound_parameters, 2100)
        self.assertEqual(limits.union_separator, DEFAULT_UNION_SEPARATOR)
        self.assertEqual(limits.batch_size, DEFAULT_BATCH_SIZE)
        self.assertEqual(limits.batch_size, 500)
        self.assertIsNone(limits.max_statement_length)

    def test_validate_rejects_bad_values(self):
        bad = [
            {"max_bound_parameters": 0},
            {"max_bound_parameters": -5},
            {"batch_size": 0},
            {"max_statement_length": 0},
            {"union_separator": "  "},
            {"row_style": "columns"},
            {"update_style": "merge"},
            {"union_separator": 5},
            {"placeholder": None},
            {"row_style": ["values"]},
            {"update_style": 1},
            {"staging_types": "TEXT"},
            {"staging_types": {"text": "TEXT"}},
            {"staging_types": {"text": "TEXT", "numeric": 38, "date": "DATE"}},
        ]
        for overrides in bad:
            with self.subTest(overrides=overrides):
                with self.assertRaises(ConfigurationError):
                    DialectLimits(**overrides).validate()

    def test_with_overrides(self):
        limits = get_dialect("sqlserver").with_overrides(batch_size=100, staging_types={"text": "VARCHAR(50)"})
        self.assertEqual(limits.batch_size, 100)
        self.assertEqual(limits.staging_types["text"], "VARCHAR(50)")
        self.assertEqual(limits.staging_types["numeric"], "DECIMAL(38, 10)")
        # Presets are not modified
        self.assertEqual(get_dialect("sqlserver").batch_size, 500)

    def test_with_overrides_rejects_unknown_fields(self):
        with self.assertRaises(ConfigurationError):
            DialectLimits().with_overrides(batch=1)

    def test_with_overrides_validates(self):
        with self.assertRaises(ConfigurationError):
            DialectLimits().with_overrides(batch_size=-1)

    def test_with_overrides_rejects_non_mapping_staging_types(self):
        with self.assertRaises(ConfigurationError):
            DialectLimits().with_overrides(staging_types="TEXT")


class TestDialects(unittest.TestCase):

    def test_presets_are_valid(self):
        for name in available_dialects():
            with self.subTest(name=name):
                self.assertEqual(get_dialect(name).validate().name, name)

    def test_postgresql_renders_values_rows(self):
        # Literal rows must take the target column types on PostgreSQL
        limits = get_dialect("postgresql")
        self.assertEqual(limits.row_style, "values")
        statement = BulkInsertBuilder(limits).build_insert(
            "t", [("id", "text"), ("hired", "date"), ("salary", "numeric")],
            [("1", "2020-01-01", None), ("2", "2021-01-01", None)],
        )
        self.assertEqual(
            statement.sql,
            "INSERT INTO t (id, hired, salary) VALUES ('1', '2020-01-01', NULL), ('2', '2021-01-01', NULL)",
        )
        self.assertNotIn("UNION", statement.sql)

    def test_case_insensitive(self):
        self.assertEqual(get_dialect("PostgreSQL").placeholder, "%s")

    def test_unknown_dialect(self):
        with self.assertRaises(ConfigurationError):
            get_dialect("oracle")


class TestLoadLimits(unittest.TestCase):

    def write_config(self, data):
        handle, path = tempfile.mkstemp(suffix=".json")
        with os.fdopen(handle, "w") as f:
            f.write(data if isinstance(data, str) else json.dumps(data))
        self.addCleanup(os.remove, path)
        return path

    def test_load_with_base_dialect(self):
        path = self.write_config({"dialect": "sqlserver", "batch_size": 250})
        limits = load_limits(path)
        self.assertEqual(limits.name, "sqlserver")
        self.assertEqual(limits.batch_size, 250)
        self.assertEqual(limits.temp_table_prefix, "#")

    def test_dialect_argument_wins(self):
        path = self.write_config({"dialect": "sqlserver", "batch_size": 250})
        limits = load_limits(path, dialect="postgresql")
        self.assertEqual(limits.name, "postgresql")
        self.assertEqual(limits.batch_size, 250)

    def test_invalid_files(self):
        for content in [
            "not json",
            "[1, 2]",
            json.dumps({"batch_size": 0}),
            json.dumps({"nope": 1}),
            json.dumps({"staging_types": "TEXT"}),
            json.dumps({"union_separator": 5}),
            json.dumps({"placeholder": ["?"]}),
        ]:
            with self.subTest(content=content):
                with self.assertRaises(ConfigurationError):
                    load_limits(self.write_config(content))

    def test_missing_file(self):
        with self.assertRaises(ConfigurationError):
            load_limits("/nonexistent/sql_bulk.json")


class TestLimitsFromEnv(unittest.TestCase):

    def test_no_overrides(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertEqual(limits_from_env(), get_dialect("generic"))

    def test_overrides(self):
        env = {
            "SQL_BULK_DIALECT": "mysql",
            "SQL_BULK_BATCH_SIZE": "50",
            "SQL_BULK_MAX_BOUND_PARAMETERS": "1000",
            "SQL_BULK_MAX_STATEMENT_LENGTH": "4096",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            limits = limits_from_env()
        self.assertEqual(limits.name, "mysql")
        self.assertEqual(limits.batch_size, 50)
        self.assertEqual(limits.max_bound_parameters, 1000)
        self.assertEqual(limits.max_statement_length, 4096)

    def test_base_ignores_dialect_variable(self):
        with mock.patch.dict(os.environ, {"SQL_BULK_DIALECT": "mysql"}, clear=True):
            self.assertEqual(limits_from_env(get_dialect("sqlite")).name, "sqlite")

    def test_invalid_integer(self):
        with mock.patch.dict(os.environ, {"SQL_BULK_BATCH_SIZE": "lots"}, clear=True):
            with self.assertRaises(ConfigurationError):
                limits_from_env()


if __name__ == "__main__":
    unittest.main()
