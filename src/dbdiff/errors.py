"""
Exception hierarchy for dbdiff.

Whether an error is fatal or scoped to one table is decided by the pipeline
driver, which turns per-table failures into TableOutcome records.
"""


class DbDiffError(Exception):
    """Base exception for all dbdiff errors."""

    pass


class SnapshotConnectionError(DbDiffError):
    """Raised when a snapshot database connection cannot be established."""

    def __init__(self, side: str, message: str):
        self.side = side
        super().__init__(f"Could not connect to {side} database: {message}")


class SnapshotQueryError(DbDiffError):
    """Raised when a metadata or data query against a snapshot fails."""

    def __init__(self, sql: str, cause: Exception):
        self.sql = sql
        self.cause = cause
        super().__init__(f"{type(cause).__name__}: {cause}")


class UnsupportedColumnTypeError(DbDiffError):
    """Raised when a table has a column whose values cannot be rendered as a literal."""

    def __init__(self, table: str, column: str, declared_type: str):
        self.table = table
        self.column = column
        self.declared_type = declared_type
        super().__init__(
            f"Table {table} column {column} is of type {declared_type} "
            "and currently not supported."
        )


class UnsafeLiteralError(DbDiffError):
    """Raised when a value cannot be encoded losslessly for its column type."""

    def __init__(self, column: str, value: str, reason: str):
        self.column = column
        self.value = value
        super().__init__(f"Cannot encode value {value!r} for column {column}: {reason}")
