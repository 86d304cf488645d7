"""
SQL safety utilities for preventing SQL injection.

Provides identifier validation for user-supplied names (table filters, schema)
and quoting helpers for names read back from the catalog.
"""

import re

from .database_types import DatabaseType

# Strict ASCII-only patterns for SQL identifiers
VALID_IDENTIFIER = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def validate_identifier(identifier: str) -> None:
    """
    Validate a SQL identifier (table name, column name, schema).

    Args:
        identifier: The identifier to validate

    Raises:
        ValueError: If the identifier contains invalid characters
    """
    if not identifier:
        raise ValueError("SQL identifier cannot be empty")

    if not VALID_IDENTIFIER.match(identifier):
        raise ValueError(
            f"Invalid SQL identifier: {identifier!r}. "
            "Only ASCII letters, digits, and underscores are allowed, "
            "and must start with a letter or underscore."
        )


def is_plain_identifier(identifier: str, db_type: DatabaseType) -> bool:
    """
    Check whether a name can be written without quotes.

    PostgreSQL folds unquoted names to lower case, so a bare name only
    resolves to the same object when it is already lower case. SQL Server
    compares names case-insensitively under its default collations.
    """
    if not VALID_IDENTIFIER.match(identifier):
        return False
    if db_type == DatabaseType.POSTGRESQL:
        return identifier == identifier.lower()
    return True


def render_identifier(identifier: str, db_type: DatabaseType) -> str:
    """
    Render an identifier bare when that is unambiguous, quoted otherwise.

    Args:
        identifier: Table or column name as stored in the catalog
        db_type: Dialect of the target database

    Returns:
        Identifier text safe for use in SQL
    """
    if not identifier:
        raise ValueError("SQL identifier cannot be empty")
    if is_plain_identifier(identifier, db_type):
        return identifier
    return db_type.quote_identifier(identifier)


def quote_qualified_name(
    table: str, db_type: DatabaseType, schema: str | None = None
) -> str:
    """
    Quote a table name, optionally qualified by its schema.

    Args:
        table: Table name as stored in the catalog
        db_type: Database type for proper quoting style
        schema: Optional schema name

    Returns:
        Quoted (schema-qualified) table name
    """
    if not table:
        raise ValueError("Table name cannot be empty")

    quoted_table = db_type.quote_identifier(table)
    if schema:
        return f"{db_type.quote_identifier(schema)}.{quoted_table}"
    return quoted_table
