"""
Key-set diff of one table between the before and after snapshots.

Each row is reduced to a RowKey built from its identity column values in
alphabetical column order. Rows whose key exists in the after snapshot only
form the ChangeSet. Updates to existing keys are not detected.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from opentelemetry import trace

from utils.database_types import DatabaseType
from utils.sql_safety import quote_qualified_name
from utils.tracing import add_span_attributes, trace_operation

from ..catalog.executor import QueryExecutor
from ..metrics import NEW_ROWS, NON_UNIQUE_IDENTITIES
from ..schema.models import TableMetadata
from ..schema.types import comparison_expression
from .encoding import to_text

logger = logging.getLogger(__name__)

KEY_SEPARATOR = "\x1f"
NULL_KEY_VALUE = "\\N"

RowKey = str
RowData = dict[str, str]


def _escape_key_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace(KEY_SEPARATOR, "\\s")


def build_row_key(table: TableMetadata, row: RowData) -> RowKey:
    """
    Build the RowKey of a row from its identity column values.

    Values are escaped so that the separator and the NULL marker cannot
    appear inside a value; a single plain value is its own key.
    """
    parts = []
    for column in table.key_columns:
        value = row.get(column.name)
        parts.append(NULL_KEY_VALUE if value is None else _escape_key_value(value))
    return KEY_SEPARATOR.join(parts)


@dataclass
class ChangeSet:
    """Newly inserted rows of one table, keyed by RowKey in discovery order."""

    table: TableMetadata
    rows: dict[RowKey, RowData] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[tuple[RowKey, RowData]]:
        return iter(self.rows.items())


class RowSetDiffer:
    """Finds rows whose identity exists only in the after snapshot."""

    def __init__(
        self,
        before_executor: QueryExecutor,
        after_executor: QueryExecutor,
        db_type: DatabaseType,
        schema: str | None = None,
    ):
        """
        Args:
            before_executor: Executor of the before snapshot
            after_executor: Executor of the after snapshot
            db_type: Dialect of both snapshots
            schema: Schema the tables live in (None = connection default)
        """
        self.before_executor = before_executor
        self.after_executor = after_executor
        self.db_type = db_type
        self.schema = schema

    def _key_query(self, table: TableMetadata) -> str:
        selected = []
        ordering = []
        for column in table.key_columns:
            quoted = self.db_type.quote_identifier(column.name)
            expression = comparison_expression(column, self.db_type)
            selected.append(quoted if expression == quoted else f"{expression} AS {quoted}")
            ordering.append(expression)
        columns = ", ".join(selected)
        order_by = ", ".join(ordering)
        quoted_table = quote_qualified_name(table.name, self.db_type, self.schema)
        # Ordered so a run emits rows in the same order every time
        return f"SELECT {columns} FROM {quoted_table} ORDER BY {order_by}"

    def index_rows(self, executor: QueryExecutor, table: TableMetadata) -> dict[RowKey, RowData]:
        """
        Index every row of ``table`` by its RowKey.

        Only identity columns are fetched; those without native equality
        (PostgreSQL json, xml, ...) are fetched as text. When two rows share
        a key the last one wins and the collision is logged.
        """
        index: dict[RowKey, RowData] = {}
        duplicates = 0

        for record in executor.query(self._key_query(table)):
            row: RowData = {}
            for column in table.key_columns:
                value = to_text(record.get(column.name))
                if value is not None:
                    row[column.name] = value
            key = build_row_key(table, row)
            if key in index:
                duplicates += 1
            index[key] = row

        if duplicates:
            NON_UNIQUE_IDENTITIES.labels(table=table.name, snapshot=executor.name).inc(duplicates)
            logger.warning(
                f"{table.name} in {executor.name} snapshot: {duplicates} rows share an identity "
                "with another row; the identity columns are not unique"
            )
        return index

    def find_new_rows(self, table: TableMetadata) -> ChangeSet:
        """Return the rows of ``table`` present after but absent before."""
        with trace_operation("find_new_rows", kind=trace.SpanKind.INTERNAL, table=table.name):
            before_index = self.index_rows(self.before_executor, table)
            after_index = self.index_rows(self.after_executor, table)

            change_set = ChangeSet(table=table)
            for key, row in after_index.items():
                if key not in before_index:
                    change_set.rows[key] = row

            logger.info(
                f"{table.name}: {len(before_index)} before, {len(after_index)} after, "
                f"{len(change_set)} new"
            )
            add_span_attributes(
                before_rows=len(before_index),
                after_rows=len(after_index),
                new_rows=len(change_set),
            )
            NEW_ROWS.labels(table=table.name).inc(len(change_set))
            return change_set
