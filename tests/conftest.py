"""
Pytest configuration and fixtures for dbdiff tests.

End-to-end tests run against in-memory SQLite databases standing in for the
before/after snapshots. SQLite accepts both "double quoted" and [bracketed]
identifiers, so the real QueryExecutor and the generated SQL run unchanged
for either dialect.
"""

import sqlite3
from collections.abc import Callable

import pytest

from dbdiff.catalog import QueryExecutor, Snapshot
from utils.database_types import DatabaseType


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "e2e: end-to-end pipeline test on SQLite snapshots")
    config.addinivalue_line("markers", "slow: mark test as slow running")


class SQLiteCatalog:
    """CatalogProvider over sqlite_master and PRAGMA table_info."""

    def __init__(self, executor: QueryExecutor):
        self.executor = executor

    def list_tables(self) -> list[str]:
        sql = (
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
        )
        return [row["name"] for row in self.executor.query(sql)]

    def row_count(self, table: str) -> int:
        quoted = table.replace('"', '""')
        return int(self.executor.query_scalar(f'SELECT COUNT(*) FROM "{quoted}"'))

    def _table_info(self, table: str) -> list[dict]:
        quoted = table.replace('"', '""')
        return list(self.executor.query(f'PRAGMA table_info("{quoted}")'))

    def primary_key_columns(self, table: str) -> list[str]:
        info = [row for row in self._table_info(table) if row["pk"] > 0]
        return [row["name"] for row in sorted(info, key=lambda row: row["pk"])]

    def columns(self, table: str) -> list[tuple[str, str]]:
        return [(row["name"], row["type"]) for row in self._table_info(table)]


def make_sqlite_snapshot(
    name: str, script: str, db_type: DatabaseType = DatabaseType.SQLSERVER
) -> Snapshot:
    """Create an in-memory snapshot populated by ``script``."""
    conn = sqlite3.connect(":memory:")
    conn.executescript(script)
    conn.commit()
    executor = QueryExecutor(
        conn,
        db_type,
        name=name,
        error_types=(sqlite3.Error,),
        fetch_size=2,
        max_retries=0,
    )
    return Snapshot(
        name=name,
        db_type=db_type,
        executor=executor,
        catalog=SQLiteCatalog(executor),
        connection=conn,
    )


@pytest.fixture
def sqlite_snapshots() -> Callable[..., tuple[Snapshot, Snapshot]]:
    """Factory building a (before, after) pair; closed after the test."""
    created: list[Snapshot] = []

    def factory(
        before_script: str, after_script: str, db_type: DatabaseType = DatabaseType.SQLSERVER
    ) -> tuple[Snapshot, Snapshot]:
        before = make_sqlite_snapshot("before", before_script, db_type)
        after = make_sqlite_snapshot("after", after_script, db_type)
        created.extend([before, after])
        return before, after

    yield factory

    for snapshot in created:
        snapshot.close()
