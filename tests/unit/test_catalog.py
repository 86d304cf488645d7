"""
Unit tests for query execution, catalog introspection and snapshot connections.
"""

import sys
from unittest.mock import MagicMock, Mock, patch

import pytest

from dbdiff.catalog import (
    ConnectionConfig,
    InformationSchemaCatalog,
    QueryExecutor,
    Snapshot,
    connect,
    open_snapshot,
)
from dbdiff.errors import SnapshotConnectionError, SnapshotQueryError
from utils.database_types import DatabaseType

PG = DatabaseType.POSTGRESQL
MSSQL = DatabaseType.SQLSERVER


class DriverError(Exception):
    pass


def make_cursor(description=(("id",), ("name",)), batches=((1, "a"), (2, "b"))):
    cursor = MagicMock()
    cursor.description = description
    cursor.fetchmany.side_effect = [list(batches), []]
    return cursor


class TestQueryExecutor:
    """Test QueryExecutor"""

    def setup_method(self):
        self.connection = Mock()
        self.cursor = make_cursor()
        self.connection.cursor.return_value = self.cursor
        self.executor = QueryExecutor(
            self.connection, PG, name="after", error_types=(DriverError,), max_retries=0
        )

    def test_rows_yielded_as_dicts(self):
        rows = list(self.executor.query("SELECT id, name FROM t"))

        assert rows == [{"id": 1, "name": "a"}, {"id": 2, "name": "b"}]
        self.cursor.execute.assert_called_once_with("SELECT id, name FROM t")
        self.cursor.close.assert_called_once()

    def test_params_passed_through(self):
        list(self.executor.query("SELECT 1 WHERE x = %s", ("public",)))

        self.cursor.execute.assert_called_once_with("SELECT 1 WHERE x = %s", ("public",))

    def test_query_is_lazy(self):
        rows = self.executor.query("SELECT 1")

        self.connection.cursor.assert_not_called()
        next(rows)
        self.connection.cursor.assert_called_once()

    def test_driver_error_wrapped(self):
        self.cursor.execute.side_effect = DriverError("syntax error at or near")

        with pytest.raises(SnapshotQueryError) as exc_info:
            list(self.executor.query("SELEKT"))

        assert exc_info.value.sql == "SELEKT"
        assert isinstance(exc_info.value.cause, DriverError)
        self.cursor.close.assert_called_once()

    def test_other_errors_propagate_unchanged(self):
        self.cursor.execute.side_effect = KeyError("unexpected")

        with pytest.raises(KeyError):
            list(self.executor.query("SELECT 1"))

    def test_transient_error_retried(self):
        executor = QueryExecutor(
            self.connection, PG, error_types=(DriverError,), max_retries=2, retry_delay=0.01
        )
        self.cursor.execute.side_effect = [DriverError("connection reset"), None]

        with patch("time.sleep"):
            rows = list(executor.query("SELECT 1"))

        assert len(rows) == 2
        assert self.cursor.execute.call_count == 2

    def test_query_scalar(self):
        self.cursor.description = (("count",),)
        self.cursor.fetchmany.side_effect = [[(42,)], []]

        assert self.executor.query_scalar("SELECT COUNT(*) FROM t") == 42
        self.cursor.close.assert_called_once()

    def test_query_scalar_empty_result(self):
        self.cursor.fetchmany.side_effect = [[]]

        assert self.executor.query_scalar("SELECT 1 WHERE 1 = 0") is None


class TestInformationSchemaCatalog:
    """Test InformationSchemaCatalog with a mocked executor"""

    def setup_method(self):
        self.executor = Mock()
        self.executor.db_type = MSSQL

    def test_list_tables(self):
        self.executor.query.return_value = iter([{"table_name": "a"}, {"table_name": "b"}])
        catalog = InformationSchemaCatalog(self.executor, "dbo")

        assert catalog.list_tables() == ["a", "b"]
        sql, params = self.executor.query.call_args[0]
        assert "information_schema.tables" in sql
        assert "table_schema = ?" in sql
        assert params == ("dbo",)

    def test_postgresql_placeholder(self):
        self.executor.db_type = PG
        self.executor.query.return_value = iter([])
        catalog = InformationSchemaCatalog(self.executor, "public")

        catalog.list_tables()

        assert "table_schema = %s" in self.executor.query.call_args[0][0]

    def test_row_count_quotes_table(self):
        self.executor.query_scalar.return_value = 7
        catalog = InformationSchemaCatalog(self.executor, "dbo")

        assert catalog.row_count("order lines") == 7
        self.executor.query_scalar.assert_called_once_with(
            "SELECT COUNT(*) AS row_count FROM [dbo].[order lines]"
        )

    def test_primary_key_columns(self):
        self.executor.query.return_value = iter([{"column_name": "a"}, {"column_name": "b"}])
        catalog = InformationSchemaCatalog(self.executor, "dbo")

        assert catalog.primary_key_columns("t") == ["a", "b"]
        assert self.executor.query.call_args[0][1] == ("dbo", "t")

    def test_columns_marks_max_types(self):
        self.executor.query.return_value = iter([
            {"column_name": "id", "data_type": "int", "max_length": None},
            {"column_name": "body", "data_type": "nvarchar", "max_length": -1},
            {"column_name": "code", "data_type": "varchar", "max_length": 10},
        ])
        catalog = InformationSchemaCatalog(self.executor, "dbo")

        assert catalog.columns("t") == [
            ("id", "int"),
            ("body", "nvarchar(max)"),
            ("code", "varchar"),
        ]


class TestConnect:
    """Test snapshot connections with patched drivers"""

    def setup_method(self):
        self.config = ConnectionConfig(
            host="db.local", database="app", user="reader", password="secret", port=5433
        )

    def test_password_not_in_repr(self):
        assert "secret" not in repr(self.config)

    def test_postgres_connection_is_read_only(self):
        psycopg2 = MagicMock()
        psycopg2.Error = DriverError

        with patch.dict(sys.modules, {"psycopg2": psycopg2}):
            conn, error_types = connect("before", self.config, PG, statement_timeout=30)

        kwargs = psycopg2.connect.call_args.kwargs
        assert kwargs["host"] == "db.local"
        assert kwargs["port"] == 5433
        assert kwargs["dbname"] == "app"
        assert kwargs["options"] == "-c statement_timeout=30000"
        conn.set_session.assert_called_once_with(readonly=True, autocommit=True)
        assert error_types == (DriverError,)

    def test_sqlserver_connection_string(self):
        pyodbc = MagicMock()
        pyodbc.Error = DriverError
        config = ConnectionConfig(host="mssql", database="app", user="sa", password="pw")

        with patch.dict(sys.modules, {"pyodbc": pyodbc}):
            conn, _ = connect("after", config, MSSQL, statement_timeout=15)

        conn_str = pyodbc.connect.call_args[0][0]
        assert "SERVER=mssql,1433;" in conn_str
        assert "DATABASE=app;" in conn_str
        assert "ApplicationIntent=ReadOnly;" in conn_str
        assert pyodbc.connect.call_args.kwargs["autocommit"] is True
        assert conn.timeout == 15

    def test_connection_failure_raises_snapshot_connection_error(self):
        psycopg2 = MagicMock()
        psycopg2.connect.side_effect = DriverError("password authentication failed")

        with patch.dict(sys.modules, {"psycopg2": psycopg2}):
            with pytest.raises(SnapshotConnectionError) as exc_info:
                connect("before", self.config, PG)

        assert exc_info.value.side == "before"
        assert "password authentication failed" in str(exc_info.value)

    def test_open_snapshot_wires_executor_and_catalog(self):
        psycopg2 = MagicMock()
        psycopg2.Error = DriverError

        with patch.dict(sys.modules, {"psycopg2": psycopg2}):
            snapshot = open_snapshot("after", self.config, PG, "sales")

        assert isinstance(snapshot, Snapshot)
        assert snapshot.executor.name == "after"
        assert snapshot.executor.error_types == (DriverError,)
        assert snapshot.catalog.schema == "sales"

        connection = snapshot.connection
        snapshot.close()
        connection.close.assert_called_once()
        assert snapshot.connection is None
