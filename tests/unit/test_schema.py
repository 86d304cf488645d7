"""
Unit tests for type classification, table metadata and identity resolution.
"""

from unittest.mock import Mock

import pytest

from dbdiff.errors import UnsupportedColumnTypeError
from dbdiff.schema import (
    ColumnMetadata,
    ColumnType,
    TableMetadata,
    classify_declared_type,
    comparison_expression,
    normalize_type_name,
    ordered_columns,
    resolve_table,
)
from utils.database_types import DatabaseType

PG = DatabaseType.POSTGRESQL
MSSQL = DatabaseType.SQLSERVER


class TestNormalizeTypeName:
    """Test declared type parsing"""

    def test_plain_type(self):
        assert normalize_type_name("INTEGER") == ("integer", None)

    def test_length_arguments(self):
        assert normalize_type_name("numeric(10, 2)") == ("numeric", "10, 2")

    def test_max_argument(self):
        assert normalize_type_name("NVARCHAR(MAX)") == ("nvarchar", "max")

    def test_whitespace_collapsed(self):
        assert normalize_type_name("  timestamp   with time  zone ") == (
            "timestamp with time zone",
            None,
        )


class TestClassifyDeclaredType:
    """Test mapping of vendor types to categories"""

    @pytest.mark.parametrize("declared,expected", [
        ("integer", ColumnType.NUMERIC),
        ("numeric(12,2)", ColumnType.NUMERIC),
        ("character varying", ColumnType.TEXT),
        ("text", ColumnType.TEXT),
        ("uuid", ColumnType.TEXT),
        ("timestamp with time zone", ColumnType.TEMPORAL),
        ("date", ColumnType.TEMPORAL),
        ("boolean", ColumnType.BOOLEAN),
        ("bytea", ColumnType.BINARY),
        ("inet", ColumnType.OTHER),
        ("money", ColumnType.TEXT),
        ("bit", ColumnType.OTHER),
        ("bit varying(8)", ColumnType.OTHER),
        ("json", ColumnType.JSON),
        ("jsonb", ColumnType.JSON),
        ("ARRAY", ColumnType.ARRAY),
    ])
    def test_postgresql(self, declared, expected):
        assert classify_declared_type(declared, PG) == expected

    @pytest.mark.parametrize("declared,expected", [
        ("int", ColumnType.NUMERIC),
        ("money", ColumnType.NUMERIC),
        ("nvarchar(50)", ColumnType.TEXT),
        ("nvarchar(max)", ColumnType.LARGE_TEXT),
        ("varchar(max)", ColumnType.LARGE_TEXT),
        ("varbinary(max)", ColumnType.BINARY),
        ("varbinary(16)", ColumnType.BINARY),
        ("text", ColumnType.LARGE_TEXT),
        ("image", ColumnType.BINARY),
        ("timestamp", ColumnType.BINARY),
        ("datetime2", ColumnType.TEMPORAL),
        ("bit", ColumnType.BOOLEAN),
        ("uniqueidentifier", ColumnType.TEXT),
    ])
    def test_sqlserver(self, declared, expected):
        assert classify_declared_type(declared, MSSQL) == expected

    def test_supported_flag(self):
        assert ColumnType.TEXT.is_supported
        assert ColumnType.OTHER.is_supported
        assert not ColumnType.BINARY.is_supported
        assert not ColumnType.LARGE_TEXT.is_supported
        assert ColumnType.JSON.is_supported
        assert ColumnType.ARRAY.is_supported


class TestComparisonExpression:
    """Test how identity columns are ordered and matched"""

    @pytest.mark.parametrize("column_type", [ColumnType.JSON, ColumnType.ARRAY, ColumnType.OTHER])
    def test_postgresql_types_without_equality_compared_as_text(self, column_type):
        column = ColumnMetadata("doc", column_type.value, column_type, True)

        assert comparison_expression(column, PG) == 'CAST("doc" AS text)'

    def test_comparable_columns_used_directly(self):
        column = ColumnMetadata("id", "integer", ColumnType.NUMERIC, True)

        assert comparison_expression(column, PG) == '"id"'
        assert comparison_expression(column, MSSQL) == "[id]"

    def test_sqlserver_other_types_not_cast(self):
        column = ColumnMetadata("node", "hierarchyid", ColumnType.OTHER, True)

        assert comparison_expression(column, MSSQL) == "[node]"


class TestTableMetadata:
    """Test TableMetadata invariants and ordering"""

    def _column(self, name, is_identity=False):
        return ColumnMetadata(name, "int", ColumnType.NUMERIC, is_identity)

    def test_duplicate_column_names_rejected(self):
        with pytest.raises(ValueError, match="Duplicate column names"):
            TableMetadata("t", (self._column("id"), self._column("id")))

    def test_key_columns_sorted_by_name(self):
        table = TableMetadata(
            "t",
            (self._column("z", True), self._column("name"), self._column("a", True)),
        )

        assert [c.name for c in table.key_columns] == ["a", "z"]
        assert [c.name for c in table.sorted_columns] == ["a", "name", "z"]

    def test_ordered_columns_ignores_input_order(self):
        columns = [self._column("b"), self._column("c"), self._column("a")]

        assert ordered_columns(columns) == ordered_columns(reversed(columns))

    def test_column_lookup(self):
        table = TableMetadata("t", (self._column("id", True),))

        assert table.column("id").is_identity
        with pytest.raises(KeyError):
            table.column("missing")


class TestResolveTable:
    """Test identity column resolution"""

    def setup_method(self):
        self.catalog = Mock()

    def test_primary_key_is_identity(self):
        self.catalog.primary_key_columns.return_value = ["id"]
        self.catalog.columns.return_value = [("id", "integer"), ("name", "text")]

        table = resolve_table(self.catalog, "t", PG)

        assert table.name == "t"
        assert [c.name for c in table.key_columns] == ["id"]
        assert not table.column("name").is_identity
        assert table.column("name").column_type == ColumnType.TEXT

    def test_no_primary_key_uses_all_columns(self):
        self.catalog.primary_key_columns.return_value = []
        self.catalog.columns.return_value = [("b_id", "int"), ("a_id", "int")]

        table = resolve_table(self.catalog, "J", MSSQL)

        assert [c.name for c in table.key_columns] == ["a_id", "b_id"]
        assert {c.name for c in table.key_columns} == {c.name for c in table.columns}

    def test_composite_key(self):
        self.catalog.primary_key_columns.return_value = ["user_id", "org_id"]
        self.catalog.columns.return_value = [
            ("org_id", "int"), ("role", "varchar(20)"), ("user_id", "int"),
        ]

        table = resolve_table(self.catalog, "memberships", MSSQL)

        assert [c.name for c in table.key_columns] == ["org_id", "user_id"]

    def test_unknown_key_column_ignored(self, caplog):
        self.catalog.primary_key_columns.return_value = ["id", "ghost"]
        self.catalog.columns.return_value = [("id", "integer"), ("name", "text")]

        with caplog.at_level("WARNING"):
            table = resolve_table(self.catalog, "t", PG)

        assert [c.name for c in table.key_columns] == ["id"]
        assert "ghost" in caplog.text

    def test_unsupported_column_raises(self):
        self.catalog.primary_key_columns.return_value = ["id"]
        self.catalog.columns.return_value = [("id", "int"), ("body", "nvarchar(max)")]

        with pytest.raises(UnsupportedColumnTypeError) as exc_info:
            resolve_table(self.catalog, "documents", MSSQL)

        assert exc_info.value.table == "documents"
        assert exc_info.value.column == "body"
        assert str(exc_info.value) == (
            "Table documents column body is of type nvarchar(max) and currently not supported."
        )
