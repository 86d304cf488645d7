"""
INSERT statement rendering.

Columns and values are written in alphabetical column order. Columns without
a value (NULL in the after snapshot) are left out of both lists.
"""

import logging
from collections.abc import Iterator

from utils.database_types import DatabaseType
from utils.sql_safety import render_identifier

from ..schema.models import TableMetadata
from .differ import ChangeSet, RowData
from .encoding import encode_literal
from .materializer import RowMaterializer

logger = logging.getLogger(__name__)


def generate_insert_sql(table: TableMetadata, row: RowData, db_type: DatabaseType) -> str:
    """
    Render ``row`` as a single-line INSERT statement.

    A row with no non-NULL values lists every column with NULL.

    Raises:
        UnsafeLiteralError: If a value cannot be encoded for its column
    """
    columns = []
    values = []
    for column in table.sorted_columns:
        value = row.get(column.name)
        if value is None:
            continue
        columns.append(render_identifier(column.name, db_type))
        values.append(encode_literal(value, column, db_type))

    if not columns:
        columns = [render_identifier(c.name, db_type) for c in table.sorted_columns]
        values = ["NULL"] * len(columns)

    return (
        f"INSERT INTO {render_identifier(table.name, db_type)} "
        f"({','.join(columns)}) VALUES ({','.join(values)});"
    )


def emit_change_set(
    change_set: ChangeSet, materializer: RowMaterializer, db_type: DatabaseType
) -> Iterator[str]:
    """
    Yield one INSERT per new row, materializing each row just before rendering.
    """
    logger.debug(f"Emitting {len(change_set)} rows of {change_set.table.name}")
    for _key, row in change_set:
        materializer.populate(change_set.table, row)
        yield generate_insert_sql(change_set.table, row, db_type)
