"""
Table/column metadata, type classification and identity column resolution.
"""

from .models import (
    UNSUPPORTED_TYPES,
    ColumnMetadata,
    ColumnType,
    TableMetadata,
    column_sort_key,
    ordered_columns,
)
from .resolver import resolve_table
from .types import (
    classify_declared_type,
    comparison_expression,
    is_text_compared,
    normalize_type_name,
)

__all__ = [
    "ColumnType",
    "ColumnMetadata",
    "TableMetadata",
    "UNSUPPORTED_TYPES",
    "column_sort_key",
    "ordered_columns",
    "classify_declared_type",
    "comparison_expression",
    "is_text_compared",
    "normalize_type_name",
    "resolve_table",
]
