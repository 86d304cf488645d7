"""
Mapping of vendor type names to semantic column categories.

The catalog reports declared types as strings ("character varying",
"nvarchar(max)", "timestamp with time zone", ...). Only the category matters
to the diff: it selects the literal format and decides whether the table can
be handled at all.
"""

import re

from utils.database_types import DatabaseType

from .models import ColumnMetadata, ColumnType

_LENGTH_SUFFIX = re.compile(r"\s*\((?P<args>[^)]*)\)")

_COMMON_TYPES: dict[str, ColumnType] = {
    # numeric
    "smallint": ColumnType.NUMERIC,
    "integer": ColumnType.NUMERIC,
    "int": ColumnType.NUMERIC,
    "bigint": ColumnType.NUMERIC,
    "tinyint": ColumnType.NUMERIC,
    "decimal": ColumnType.NUMERIC,
    "numeric": ColumnType.NUMERIC,
    "real": ColumnType.NUMERIC,
    "float": ColumnType.NUMERIC,
    "double precision": ColumnType.NUMERIC,
    "number": ColumnType.NUMERIC,
    # text
    "character varying": ColumnType.TEXT,
    "varchar": ColumnType.TEXT,
    "character": ColumnType.TEXT,
    "char": ColumnType.TEXT,
    "nchar": ColumnType.TEXT,
    "nvarchar": ColumnType.TEXT,
    # temporal
    "date": ColumnType.TEMPORAL,
    "time": ColumnType.TEMPORAL,
    "timestamp": ColumnType.TEMPORAL,
    # boolean
    "boolean": ColumnType.BOOLEAN,
    # large objects
    "blob": ColumnType.BINARY,
    "binary": ColumnType.BINARY,
    "varbinary": ColumnType.BINARY,
    "clob": ColumnType.LARGE_TEXT,
    "nclob": ColumnType.LARGE_TEXT,
}

_DIALECT_TYPES: dict[DatabaseType, dict[str, ColumnType]] = {
    DatabaseType.POSTGRESQL: {
        "int2": ColumnType.NUMERIC,
        "int4": ColumnType.NUMERIC,
        "int8": ColumnType.NUMERIC,
        "float4": ColumnType.NUMERIC,
        "float8": ColumnType.NUMERIC,
        # locale formatted by the server, e.g. $1,234.50
        "money": ColumnType.TEXT,
        "text": ColumnType.TEXT,
        "citext": ColumnType.TEXT,
        "name": ColumnType.TEXT,
        "uuid": ColumnType.TEXT,
        "json": ColumnType.JSON,
        "jsonb": ColumnType.JSON,
        "array": ColumnType.ARRAY,
        "timestamp without time zone": ColumnType.TEMPORAL,
        "timestamp with time zone": ColumnType.TEMPORAL,
        "timestamptz": ColumnType.TEMPORAL,
        "time without time zone": ColumnType.TEMPORAL,
        "time with time zone": ColumnType.TEMPORAL,
        "interval": ColumnType.TEMPORAL,
        "bool": ColumnType.BOOLEAN,
        "bit": ColumnType.OTHER,
        "bit varying": ColumnType.OTHER,
        "varbit": ColumnType.OTHER,
        "bytea": ColumnType.BINARY,
        "oid": ColumnType.BINARY,
    },
    DatabaseType.SQLSERVER: {
        "money": ColumnType.NUMERIC,
        "smallmoney": ColumnType.NUMERIC,
        "bit": ColumnType.BOOLEAN,
        "uniqueidentifier": ColumnType.TEXT,
        "datetime": ColumnType.TEMPORAL,
        "datetime2": ColumnType.TEMPORAL,
        "smalldatetime": ColumnType.TEMPORAL,
        "datetimeoffset": ColumnType.TEMPORAL,
        "text": ColumnType.LARGE_TEXT,
        "ntext": ColumnType.LARGE_TEXT,
        "xml": ColumnType.LARGE_TEXT,
        "image": ColumnType.BINARY,
        "timestamp": ColumnType.BINARY,
        "rowversion": ColumnType.BINARY,
    },
}

# PostgreSQL has no equality or ordering operator for json, xml, point and
# similar types; identity columns in these categories are compared as text.
_TEXT_COMPARED_TYPES: dict[DatabaseType, frozenset[ColumnType]] = {
    DatabaseType.POSTGRESQL: frozenset({ColumnType.JSON, ColumnType.ARRAY, ColumnType.OTHER}),
    DatabaseType.SQLSERVER: frozenset(),
}


def normalize_type_name(declared_type: str) -> tuple[str, str | None]:
    """
    Split a declared type into its lower-cased base name and its arguments.

    >>> normalize_type_name("NVARCHAR(MAX)")
    ('nvarchar', 'max')
    >>> normalize_type_name("numeric(10, 2)")
    ('numeric', '10, 2')
    """
    lowered = " ".join(declared_type.strip().lower().split())
    match = _LENGTH_SUFFIX.search(lowered)
    if match is None:
        return lowered, None
    base = (lowered[:match.start()] + lowered[match.end():]).strip()
    return " ".join(base.split()), match.group("args").strip()


def classify_declared_type(declared_type: str, db_type: DatabaseType) -> ColumnType:
    """
    Map a declared type to its semantic category.

    Dialect-specific names win over the common table; SQL Server ``(max)``
    variants of varchar/nvarchar/varbinary are large objects. Unknown types
    are OTHER and render as quoted literals.
    """
    base, args = normalize_type_name(declared_type)

    if db_type == DatabaseType.SQLSERVER and args == "max":
        if base in ("varchar", "nvarchar"):
            return ColumnType.LARGE_TEXT
        if base == "varbinary":
            return ColumnType.BINARY

    dialect_types = _DIALECT_TYPES.get(db_type, {})
    if base in dialect_types:
        return dialect_types[base]
    return _COMMON_TYPES.get(base, ColumnType.OTHER)


def is_text_compared(column: ColumnMetadata, db_type: DatabaseType) -> bool:
    return column.column_type in _TEXT_COMPARED_TYPES.get(db_type, frozenset())


def comparison_expression(column: ColumnMetadata, db_type: DatabaseType) -> str:
    """
    SQL expression used to order and match ``column`` as an identity column.

    >>> comparison_expression(ColumnMetadata("doc", "json", ColumnType.JSON), DatabaseType.POSTGRESQL)
    'CAST("doc" AS text)'
    """
    quoted = db_type.quote_identifier(column.name)
    if is_text_compared(column, db_type):
        return f"CAST({quoted} AS text)"
    return quoted
