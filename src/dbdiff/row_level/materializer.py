"""
Full-row lookup of new rows in the after snapshot.
"""

import logging

from utils.database_types import DatabaseType
from utils.sql_safety import quote_qualified_name

from ..catalog.executor import QueryExecutor
from ..metrics import NON_UNIQUE_IDENTITIES
from ..schema.models import TableMetadata
from ..schema.types import comparison_expression
from .differ import RowData
from .encoding import encode_literal, to_text

logger = logging.getLogger(__name__)


def build_row_predicate(table: TableMetadata, row: RowData, db_type: DatabaseType) -> str:
    """
    Build the WHERE condition matching a row by its identity values.

    Literals go through the same encoder as emitted INSERTs. An identity
    column without a value matches with ``IS NULL``; columns without native
    equality are compared through their text form.
    """
    conditions = []
    for column in table.key_columns:
        expression = comparison_expression(column, db_type)
        value = row.get(column.name)
        if value is None:
            conditions.append(f"{expression} IS NULL")
        else:
            conditions.append(f"{expression} = {encode_literal(value, column, db_type)}")
    return " AND ".join(conditions)


class RowMaterializer:
    """Fills RowData with the column values of a row in the after snapshot."""

    def __init__(self, executor: QueryExecutor, db_type: DatabaseType, schema: str | None = None):
        self.executor = executor
        self.db_type = db_type
        self.schema = schema

    def populate(self, table: TableMetadata, row: RowData) -> RowData:
        """
        Look the row up by its identity and copy all its values into ``row``.

        With several matches the last one wins, NULLs included: a column that
        is NULL in the last match is removed from ``row``.

        Returns:
            The same ``row`` object, filled in place
        """
        quoted_table = quote_qualified_name(table.name, self.db_type, self.schema)
        predicate = build_row_predicate(table, row, self.db_type)
        sql = f"SELECT * FROM {quoted_table} WHERE {predicate}"

        column_types = {column.name: column.column_type for column in table.columns}
        matches = 0
        for record in self.executor.query(sql):
            matches += 1
            for name, value in record.items():
                text = to_text(value, column_types.get(name))
                if text is None:
                    row.pop(name, None)
                else:
                    row[name] = text

        if matches == 0:
            logger.warning(f"{table.name}: no row matches {predicate} in {self.executor.name} snapshot")
        elif matches > 1:
            NON_UNIQUE_IDENTITIES.labels(table=table.name, snapshot=self.executor.name).inc(matches - 1)
            logger.warning(
                f"{table.name}: {matches} rows match {predicate}; using the last one"
            )
        return row
