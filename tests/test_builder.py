"""
Unit tests for INSERT statement synthesis.
"""
import unittest

from sql_bulk.builder import BulkInsertBuilder, InsertStatement
from sql_bulk.config import DialectLimits, get_dialect
from sql_bulk.exceptions import StatementTooLongError, ValidationError
from sql_bulk.models import ColumnSpec, ColumnType, EncodingMode

BOUND = EncodingMode.BOUND_PARAMETERS
LITERAL = EncodingMode.LITERAL_VALUES


class TestLiteralInsert(unittest.TestCase):
    """Test cases for literal_values mode."""

    def setUp(self):
        self.builder = BulkInsertBuilder(DialectLimits())
        self.columns = ["name", "contract"]
        self.batch = [("O'Brien", "CDI"), (None, "CDD"), ("Wu", None)]

    def test_union_of_selects(self):
        statement = self.builder.build_insert("employees", self.columns, self.batch, LITERAL)
        self.assertEqual(
            statement.sql,
            "INSERT INTO employees (name, contract) "
            "SELECT 'O''Brien', 'CDI' UNION ALL SELECT NULL, 'CDD' UNION ALL SELECT 'Wu', NULL"
        )
        self.assertEqual(statement.params, ())
        self.assertEqual(statement.row_count, 3)

    def test_select_rows(self):
        specs = [ColumnSpec("name"), ColumnSpec("contract")]
        self.assertEqual(
            self.builder.select_rows(specs, self.batch),
            "SELECT 'O''Brien', 'CDI' UNION ALL SELECT NULL, 'CDD' UNION ALL SELECT 'Wu', NULL"
        )

    def test_column_types(self):
        columns = [ColumnSpec("id"), ColumnSpec("salary", ColumnType.NUMERIC)]
        statement = self.builder.build_insert("t", columns, [("001", "1500.50"), ("002", "n/a")], LITERAL)
        self.assertEqual(
            statement.sql,
            "INSERT INTO t (id, salary) SELECT '001', 1500.5 UNION ALL SELECT '002', NULL"
        )

    def test_custom_union_separator(self):
        builder = BulkInsertBuilder(DialectLimits(union_separator="UNION"))
        statement = builder.build_insert("t", ["a"], [(1,), (2,)], LITERAL)
        self.assertEqual(statement.sql, "INSERT INTO t (a) SELECT '1' UNION SELECT '2'")

    def test_values_row_style(self):
        builder = BulkInsertBuilder(get_dialect("sqlite"))
        statement = builder.build_insert("t", ["a", ("b", "numeric")], [("x", 1), ("y", None)], LITERAL)
        self.assertEqual(statement.sql, "INSERT INTO t (a, b) VALUES ('x', 1), ('y', NULL)")

    def test_idempotent(self):
        first = self.builder.build_insert("employees", self.columns, self.batch, LITERAL)
        second = self.builder.build_insert("employees", self.columns, self.batch, LITERAL)
        self.assertEqual(first, second)


class TestBoundInsert(unittest.TestCase):
    """Test cases for bound_parameters mode."""

    def test_placeholders_and_params(self):
        builder = BulkInsertBuilder(DialectLimits())
        statement = builder.build_insert("t", ["a", "b"], [(1, "x"), (2, None)], BOUND)
        self.assertEqual(statement.sql, "INSERT INTO t (a, b) VALUES (?, ?), (?, ?)")
        self.assertEqual(statement.params, (1, "x", 2, None))
        self.assertEqual(statement.row_count, 2)

    def test_dialect_placeholder(self):
        builder = BulkInsertBuilder(get_dialect("postgresql"))
        statement = builder.build_insert("t", ["a"], [(1,), (2,)], BOUND)
        self.assertEqual(statement.sql, "INSERT INTO t (a) VALUES (%s), (%s)")

    def test_parameter_ceiling(self):
        builder = BulkInsertBuilder(DialectLimits(max_bound_parameters=4))
        builder.build_insert("t", ["a", "b"], [(1, 2), (3, 4)], BOUND)
        with self.assertRaises(ValidationError):
            builder.build_insert("t", ["a", "b"], [(1, 2), (3, 4), (5, 6)], BOUND)

    def test_literal_mode_ignores_parameter_ceiling(self):
        builder = BulkInsertBuilder(DialectLimits(max_bound_parameters=4))
        statement = builder.build_insert("t", ["a", "b"], [(1, 2), (3, 4), (5, 6)], LITERAL)
        self.assertEqual(statement.row_count, 3)


class TestValidation(unittest.TestCase):
    """Test cases for malformed input."""

    def setUp(self):
        self.builder = BulkInsertBuilder(DialectLimits())

    def test_empty_batch(self):
        with self.assertRaises(ValidationError):
            self.builder.build_insert("t", ["a"], [], LITERAL)

    def test_no_columns(self):
        with self.assertRaises(ValidationError):
            self.builder.build_insert("t", [], [(1,)], LITERAL)

    def test_arity_mismatch(self):
        for mode in (BOUND, LITERAL):
            with self.subTest(mode=mode):
                with self.assertRaises(ValidationError):
                    self.builder.build_insert("t", ["a", "b"], [(1, 2), (3,)], mode)

    def test_unsafe_identifiers(self):
        with self.assertRaises(ValidationError):
            self.builder.build_insert("t; DROP TABLE x", ["a"], [(1,)], LITERAL)
        with self.assertRaises(ValidationError):
            self.builder.build_insert("t", ["a) VALUES (1); --"], [(1,)], LITERAL)

    def test_qualified_names_allowed(self):
        statement = self.builder.build_insert("dbo.employees", ["a"], [(1,)], LITERAL)
        self.assertTrue(statement.sql.startswith("INSERT INTO dbo.employees (a) "))

    def test_statement_length_limit(self):
        builder = BulkInsertBuilder(DialectLimits(max_statement_length=60))
        builder.build_insert("t", ["a"], [("x",)], LITERAL)
        with self.assertRaises(StatementTooLongError) as ctx:
            builder.build_insert("t", ["a"], [("x" * 100,)], LITERAL)
        self.assertEqual(ctx.exception.limit, 60)
        self.assertGreater(ctx.exception.length, 60)
        self.assertIsInstance(ctx.exception, ValidationError)


class TestInsertStatement(unittest.TestCase):

    def test_defaults(self):
        statement = InsertStatement("SELECT 1")
        self.assertEqual(statement.params, ())
        self.assertEqual(statement.row_count, 0)


if __name__ == "__main__":
    unittest.main()
