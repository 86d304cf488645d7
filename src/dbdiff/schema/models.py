"""
Table and column metadata.

Column order matters in three places: RowKey construction, the row lookup
predicate and emitted INSERT column lists. All three go through
``ordered_columns`` so they can never disagree.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum


class ColumnType(str, Enum):
    """Semantic category of a column's declared type."""

    NUMERIC = "numeric"
    TEXT = "text"
    TEMPORAL = "temporal"
    BOOLEAN = "boolean"
    JSON = "json"
    ARRAY = "array"
    OTHER = "other"
    BINARY = "binary"
    LARGE_TEXT = "large_text"

    @property
    def is_supported(self) -> bool:
        """Whether values of this category can be written as a delimited literal."""
        return self not in UNSUPPORTED_TYPES


UNSUPPORTED_TYPES = frozenset({ColumnType.BINARY, ColumnType.LARGE_TEXT})


def column_sort_key(column: "ColumnMetadata") -> str:
    """Sort key shared by every ordered traversal of a table's columns."""
    return column.name


def ordered_columns(columns: Iterable["ColumnMetadata"]) -> list["ColumnMetadata"]:
    """Return columns in alphabetical name order."""
    return sorted(columns, key=column_sort_key)


@dataclass(frozen=True, order=True)
class ColumnMetadata:
    """A column of a snapshot table. Compared and ordered by name."""

    name: str
    declared_type: str = field(compare=False)
    column_type: ColumnType = field(compare=False)
    is_identity: bool = field(default=False, compare=False)


@dataclass(frozen=True)
class TableMetadata:
    """A candidate table with its columns (catalog order) and identity flags."""

    name: str
    columns: tuple[ColumnMetadata, ...]

    def __post_init__(self):
        names = [column.name for column in self.columns]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate column names in table {self.name}: {names}")

    @property
    def key_columns(self) -> list[ColumnMetadata]:
        """Identity columns in alphabetical order."""
        return ordered_columns(c for c in self.columns if c.is_identity)

    @property
    def sorted_columns(self) -> list[ColumnMetadata]:
        """All columns in alphabetical order."""
        return ordered_columns(self.columns)

    def column(self, name: str) -> ColumnMetadata:
        for column in self.columns:
            if column.name == name:
                return column
        raise KeyError(f"Table {self.name} has no column {name}")
