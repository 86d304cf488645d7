"""
Catalog introspection for one snapshot schema.

``CatalogProvider`` is the interface the diff core depends on;
``InformationSchemaCatalog`` implements it with the ANSI
``information_schema`` views, which PostgreSQL and SQL Server both provide.
"""

import logging
from typing import Protocol

from utils.sql_safety import quote_qualified_name

from .executor import QueryExecutor

logger = logging.getLogger(__name__)


class CatalogProvider(Protocol):
    """Read-only view of one schema's tables, keys and columns."""

    def list_tables(self) -> list[str]: ...

    def row_count(self, table: str) -> int: ...

    def primary_key_columns(self, table: str) -> list[str]: ...

    def columns(self, table: str) -> list[tuple[str, str]]: ...


class InformationSchemaCatalog:
    """CatalogProvider backed by ``information_schema`` queries."""

    def __init__(self, executor: QueryExecutor, schema: str):
        """
        Args:
            executor: Query executor of the snapshot
            schema: Schema whose tables are diffed
        """
        self.executor = executor
        self.schema = schema
        self.db_type = executor.db_type

    def list_tables(self) -> list[str]:
        """Base tables of the schema, sorted by name."""
        p = self.db_type.get_placeholder()
        sql = (
            "SELECT table_name AS table_name FROM information_schema.tables "
            f"WHERE table_schema = {p} AND table_type = 'BASE TABLE' "
            "ORDER BY table_name"
        )
        return [row["table_name"] for row in self.executor.query(sql, (self.schema,))]

    def row_count(self, table: str) -> int:
        """Exact row count (``COUNT(*)``, not planner statistics)."""
        quoted = quote_qualified_name(table, self.db_type, self.schema)
        count = self.executor.query_scalar(f"SELECT COUNT(*) AS row_count FROM {quoted}")
        return int(count or 0)

    def primary_key_columns(self, table: str) -> list[str]:
        """Primary-key column names in key order; empty if the table has no PK."""
        p = self.db_type.get_placeholder()
        sql = (
            "SELECT kcu.column_name AS column_name "
            "FROM information_schema.table_constraints tc "
            "JOIN information_schema.key_column_usage kcu "
            "ON tc.constraint_name = kcu.constraint_name "
            "AND tc.constraint_schema = kcu.constraint_schema "
            "AND tc.table_name = kcu.table_name "
            f"WHERE tc.constraint_type = 'PRIMARY KEY' "
            f"AND tc.table_schema = {p} AND tc.table_name = {p} "
            "ORDER BY kcu.ordinal_position"
        )
        return [
            row["column_name"]
            for row in self.executor.query(sql, (self.schema, table))
        ]

    def columns(self, table: str) -> list[tuple[str, str]]:
        """
        ``(name, declared_type)`` pairs in ordinal order.

        SQL Server reports ``varchar(max)`` and friends with a maximum length
        of -1; those are rendered as ``<type>(max)`` so they classify as large
        objects.
        """
        p = self.db_type.get_placeholder()
        sql = (
            "SELECT column_name AS column_name, data_type AS data_type, "
            "character_maximum_length AS max_length "
            "FROM information_schema.columns "
            f"WHERE table_schema = {p} AND table_name = {p} "
            "ORDER BY ordinal_position"
        )
        result = []
        for row in self.executor.query(sql, (self.schema, table)):
            declared_type = row["data_type"]
            if row.get("max_length") == -1:
                declared_type = f"{declared_type}(max)"
            result.append((row["column_name"], declared_type))
        return result
