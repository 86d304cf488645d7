"""
Conversion of driver values to RowData text, and of RowData text to SQL literals.

Every literal in generated SQL, whether in a lookup predicate or an emitted
INSERT, is produced by ``encode_literal``. The format is chosen from the
column's semantic type, never from the shape of the value.
"""

import json
import re
from collections.abc import Callable
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any

from utils.database_types import DatabaseType

from ..errors import UnsafeLiteralError
from ..schema.models import ColumnMetadata, ColumnType
from ..schema.types import normalize_type_name

NUMERIC_LITERAL = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")
_SECONDS_FRACTION = re.compile(r"(?<=\d{2}:\d{2}:\d{2})\.(\d+)")

TRUE_VALUES = frozenset({"true", "t", "1"})
FALSE_VALUES = frozenset({"false", "f", "0"})

# Fractional second digits accepted by SQL Server's legacy datetime types
_SQLSERVER_FRACTION_DIGITS = {"datetime": 3, "smalldatetime": 0}


def _interval_text(value: timedelta) -> str:
    # Days and seconds keep their own signs, as timedelta normalizes them
    return f"{value.days} days {value.seconds}.{value.microseconds:06d} seconds"


def _array_text(values) -> str:
    """Render a driver list as a PostgreSQL array literal (``{"a","b"}``)."""
    items = []
    for item in values:
        if item is None:
            items.append("NULL")
        elif isinstance(item, (list, tuple)):
            items.append(_array_text(item))
        else:
            escaped = to_text(item).replace("\\", "\\\\").replace('"', '\\"')
            items.append(f'"{escaped}"')
    return "{" + ",".join(items) + "}"


def to_text(value: Any, column_type: ColumnType | None = None) -> str | None:
    """
    Convert a value returned by the driver to its RowData text form.

    Args:
        value: Value as returned by psycopg2 or pyodbc
        column_type: Category of the source column, when known. JSON columns
            are re-serialized because psycopg2 hands them back parsed.

    Returns:
        None for SQL NULL, otherwise the canonical text of the value
    """
    if value is None:
        return None
    if column_type == ColumnType.JSON:
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return _interval_text(value)
    if isinstance(value, (list, tuple)):
        return _array_text(value)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, (Decimal, int, float)):
        return str(value)
    return str(value)


def _numeric_literal(value: str, column: ColumnMetadata, db_type: DatabaseType) -> str:
    text = value.strip()
    if not NUMERIC_LITERAL.match(text):
        raise UnsafeLiteralError(column.name, value, "not a plain number")
    return text


def _boolean_literal(value: str, column: ColumnMetadata, db_type: DatabaseType) -> str:
    text = value.strip().lower()
    if text in TRUE_VALUES:
        return db_type.boolean_literal(True)
    if text in FALSE_VALUES:
        return db_type.boolean_literal(False)
    raise UnsafeLiteralError(column.name, value, "not a boolean")


def _quoted_literal(value: str, column: ColumnMetadata, db_type: DatabaseType) -> str:
    if "\x00" in value:
        raise UnsafeLiteralError(column.name, value, "contains a NUL character")
    escaped = value.replace("'", "''")
    return f"'{escaped}'"


def _temporal_literal(value: str, column: ColumnMetadata, db_type: DatabaseType) -> str:
    if db_type == DatabaseType.SQLSERVER:
        base, _ = normalize_type_name(column.declared_type)
        digits = _SQLSERVER_FRACTION_DIGITS.get(base)
        if digits is not None:
            value = _SECONDS_FRACTION.sub(
                lambda m: f".{m.group(1)[:digits]}" if digits else "", value
            )
    return _quoted_literal(value, column, db_type)


LITERAL_FORMATS: dict[ColumnType, Callable[[str, ColumnMetadata, DatabaseType], str]] = {
    ColumnType.NUMERIC: _numeric_literal,
    ColumnType.BOOLEAN: _boolean_literal,
    ColumnType.TEXT: _quoted_literal,
    ColumnType.TEMPORAL: _temporal_literal,
    ColumnType.JSON: _quoted_literal,
    ColumnType.ARRAY: _quoted_literal,
    ColumnType.OTHER: _quoted_literal,
}


def encode_literal(value: str, column: ColumnMetadata, db_type: DatabaseType) -> str:
    """
    Render one RowData value as a SQL literal for ``column``.

    Args:
        value: Textual value (never None; NULLs are absent from RowData)
        column: Column the value belongs to
        db_type: Target dialect

    Returns:
        Literal text safe to splice into a statement

    Raises:
        UnsafeLiteralError: If the value cannot be written losslessly
    """
    formatter = LITERAL_FORMATS.get(column.column_type)
    if formatter is None:
        raise UnsafeLiteralError(
            column.name, value, f"columns of type {column.declared_type} cannot be rendered"
        )
    return formatter(value, column, db_type)
