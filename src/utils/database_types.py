"""
Database type enumeration for type-safe dialect identification.

Both snapshots of a run share one dialect; this enum carries the few places
where PostgreSQL and SQL Server differ (quoting, placeholders, default schema,
boolean literals).
"""

from enum import Enum


class DatabaseType(str, Enum):
    """
    Enumeration of supported database types.

    Inherits from str for JSON serialization compatibility and
    easy comparison with string values.
    """

    POSTGRESQL = "postgresql"
    SQLSERVER = "sqlserver"

    @property
    def default_schema(self) -> str:
        """Schema used when none is configured."""
        if self == DatabaseType.POSTGRESQL:
            return "public"
        return "dbo"

    def get_placeholder(self) -> str:
        """
        Get the DB-API parameter placeholder for this database's driver.

        psycopg2 uses the ``format`` paramstyle, pyodbc uses ``qmark``.
        """
        if self == DatabaseType.POSTGRESQL:
            return "%s"
        return "?"

    def quote_identifier(self, identifier: str) -> str:
        """
        Quote identifier based on database type.

        Embedded quote characters are doubled so any catalog name
        round-trips safely.

        Args:
            identifier: Column or table name

        Returns:
            Quoted identifier string
        """
        if self == DatabaseType.POSTGRESQL:
            escaped = identifier.replace('"', '""')
            return f'"{escaped}"'
        escaped = identifier.replace("]", "]]")
        return f"[{escaped}]"

    def boolean_literal(self, value: bool) -> str:
        """Render a boolean as a SQL literal."""
        if self == DatabaseType.POSTGRESQL:
            return "TRUE" if value else "FALSE"
        return "1" if value else "0"
