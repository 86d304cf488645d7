"""
Read-only query execution against one snapshot.

Rows are yielded as dicts keyed by column name from a forward-only cursor,
fetched in batches so a full-table scan does not need a second copy of the
result set in Python.
"""

import logging
from collections.abc import Iterator, Sequence
from typing import Any

from opentelemetry import trace

from utils.database_types import DatabaseType
from utils.retry import retry_database_operation
from utils.tracing import trace_operation

from ..errors import SnapshotQueryError

logger = logging.getLogger(__name__)


def _execute_statement(cursor: Any, sql: str, params: Sequence[Any] | None) -> None:
    # pyodbc treats a trailing None as one bound parameter
    if params is None:
        cursor.execute(sql)
    else:
        cursor.execute(sql, params)


class QueryExecutor:
    """Runs SELECT statements on a snapshot connection."""

    def __init__(
        self,
        connection: Any,
        db_type: DatabaseType,
        name: str = "snapshot",
        error_types: tuple[type[BaseException], ...] = (Exception,),
        fetch_size: int = 1000,
        max_retries: int = 3,
        retry_delay: float = 1.0,
    ):
        """
        Args:
            connection: DB-API 2.0 connection
            db_type: Dialect of the connection
            name: Snapshot label used in logs and spans ("before"/"after")
            error_types: Driver exception classes converted to SnapshotQueryError
            fetch_size: Rows per fetchmany() batch
            max_retries: Retries for transient execute() failures
            retry_delay: Base backoff delay in seconds
        """
        self.connection = connection
        self.db_type = db_type
        self.name = name
        self.error_types = error_types
        self.fetch_size = fetch_size
        self._execute = retry_database_operation(
            max_retries=max_retries, base_delay=retry_delay
        )(_execute_statement)

    def query(self, sql: str, params: Sequence[Any] | None = None) -> Iterator[dict[str, Any]]:
        """
        Execute ``sql`` and yield each row as a dict.

        Execution is lazy: nothing runs until the first row is requested.
        The cursor is closed when the generator is exhausted or closed.

        Raises:
            SnapshotQueryError: If the driver reports an error
        """
        try:
            cursor = self.connection.cursor()
        except self.error_types as e:
            raise SnapshotQueryError(sql, e) from e

        try:
            with trace_operation(
                "snapshot_query",
                kind=trace.SpanKind.CLIENT,
                snapshot=self.name,
                db_system=self.db_type.value,
            ):
                logger.debug(f"[{self.name}] {sql}")
                try:
                    self._execute(cursor, sql, params)
                except self.error_types as e:
                    raise SnapshotQueryError(sql, e) from e

            columns = [desc[0] for desc in cursor.description or ()]
            while True:
                try:
                    batch = cursor.fetchmany(self.fetch_size)
                except self.error_types as e:
                    raise SnapshotQueryError(sql, e) from e
                if not batch:
                    break
                for row in batch:
                    yield dict(zip(columns, row))
        finally:
            cursor.close()

    def query_scalar(self, sql: str, params: Sequence[Any] | None = None) -> Any:
        """Return the first column of the first row, or None for an empty result."""
        rows = self.query(sql, params)
        try:
            row = next(rows, None)
        finally:
            rows.close()
        if row is None:
            return None
        return next(iter(row.values()), None)
