"""
Table-level change detection
"""

from .counts import collect_row_counts, compare_row_counts, find_tables_with_changes

__all__ = [
    "collect_row_counts",
    "compare_row_counts",
    "find_tables_with_changes",
]
