"""
Identity column resolution for candidate tables.

Usually the identity is the primary key (often just ``ID``); tables without a
key (join/bridge tables) use every column, so the RowKey covers the whole row.
"""

import logging

from opentelemetry import trace

from utils.database_types import DatabaseType
from utils.tracing import trace_operation

from ..catalog.provider import CatalogProvider
from ..errors import UnsupportedColumnTypeError
from .models import ColumnMetadata, ColumnType, TableMetadata
from .types import classify_declared_type

logger = logging.getLogger(__name__)


def resolve_table(
    catalog: CatalogProvider, table_name: str, db_type: DatabaseType
) -> TableMetadata:
    """
    Build the metadata of one table, marking its identity columns.

    Args:
        catalog: Catalog of the snapshot the metadata is read from
        table_name: Table to resolve
        db_type: Dialect used to classify declared types

    Returns:
        TableMetadata with columns in catalog order

    Raises:
        UnsupportedColumnTypeError: If any column holds large binary/text data
    """
    with trace_operation("resolve_table", kind=trace.SpanKind.INTERNAL, table=table_name):
        key_names = catalog.primary_key_columns(table_name)
        declared_columns = catalog.columns(table_name)

        columns = []
        for name, declared_type in declared_columns:
            column_type = classify_declared_type(declared_type, db_type)
            if not column_type.is_supported:
                raise UnsupportedColumnTypeError(table_name, name, declared_type)
            if column_type == ColumnType.TEMPORAL:
                logger.debug(f"{table_name}.{name} is temporal ({declared_type})")
            columns.append((name, declared_type, column_type))

        column_names = {name for name, _, _ in columns}
        missing = [name for name in key_names if name not in column_names]
        if missing:
            logger.warning(
                f"Primary key columns {missing} of {table_name} not found in column list; ignoring them"
            )
        identity_names = {name for name in key_names if name in column_names}

        if not identity_names:
            logger.debug(f"{table_name} has no primary key, using all columns as identity")
            identity_names = column_names

        table = TableMetadata(
            name=table_name,
            columns=tuple(
                ColumnMetadata(
                    name=name,
                    declared_type=declared_type,
                    column_type=column_type,
                    is_identity=name in identity_names,
                )
                for name, declared_type, column_type in columns
            ),
        )

        logger.debug(
            f"Resolved {table_name}: {len(table.columns)} columns, "
            f"identity={[c.name for c in table.key_columns]}"
        )
        return table
