"""
Table-level change detection from row counts.

A table is a candidate for row-level diffing only when the after snapshot
holds strictly more rows than the before snapshot. Counts are ``int | None``:
``None`` means the table exists but its count could not be read, which forces
a recheck instead of silently dropping the table.
"""

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from ..catalog.provider import CatalogProvider
from ..errors import SnapshotQueryError

logger = logging.getLogger(__name__)


def collect_row_counts(
    catalog: CatalogProvider,
    tables: Iterable[str] | None = None,
    tolerate_errors: bool = False,
) -> dict[str, int | None]:
    """
    Count the rows of every table of one snapshot.

    Args:
        catalog: Catalog of the snapshot
        tables: Optional allow-list; tables missing from the snapshot are left out
        tolerate_errors: Record a failed count as None instead of raising

    Returns:
        Mapping of table name to row count (None when unknown)

    Raises:
        SnapshotQueryError: If a count query fails and errors are not tolerated
    """
    names = catalog.list_tables()
    if tables is not None:
        wanted = set(tables)
        names = [name for name in names if name in wanted]

    counts: dict[str, int | None] = {}
    for name in names:
        try:
            counts[name] = catalog.row_count(name)
        except SnapshotQueryError as e:
            if not tolerate_errors:
                raise
            logger.warning(f"Could not count rows of {name}: {e}")
            counts[name] = None
    return counts


def compare_row_counts(
    table_name: str,
    before_count: int | None,
    after_count: int | None,
) -> dict[str, Any]:
    """
    Compare the row counts of one table in both snapshots

    Args:
        table_name: Name of the table being compared
        before_count: Row count in the before snapshot (None if unknown)
        after_count: Row count in the after snapshot (None if unknown)

    Returns:
        Dictionary containing comparison results:
        - table: Table name
        - before_count: Before row count
        - after_count: After row count
        - difference: after - before (None if either count is unknown)
        - status: GROWN, UNCHANGED, SHRUNK or UNKNOWN
        - timestamp: ISO format timestamp

    Raises:
        ValueError: If a row count is negative
    """
    for count in (before_count, after_count):
        if count is not None and count < 0:
            raise ValueError(
                f"Row counts cannot be negative: before={before_count}, after={after_count}"
            )

    if before_count is None or after_count is None:
        difference = None
        status = "UNKNOWN"
    else:
        difference = after_count - before_count
        if difference > 0:
            status = "GROWN"
        elif difference < 0:
            status = "SHRUNK"
        else:
            status = "UNCHANGED"

    return {
        "table": table_name,
        "before_count": before_count,
        "after_count": after_count,
        "difference": difference,
        "status": status,
        "timestamp": datetime.now(UTC).isoformat(),
    }


def find_tables_with_changes(
    before_counts: dict[str, int | None],
    after_counts: dict[str, int | None],
) -> list[str]:
    """
    Select the tables whose row count grew between the snapshots.

    Tables present in only one snapshot are schema drift and excluded. A
    table with an unknown count is included so its rows are compared.

    Returns:
        Sorted, duplicate-free list of candidate table names
    """
    for name in sorted(set(before_counts) ^ set(after_counts)):
        side = "before" if name in before_counts else "after"
        logger.warning(f"Table {name} only exists in the {side} snapshot; skipping it")

    changed = []
    for name in sorted(set(before_counts) & set(after_counts)):
        comparison = compare_row_counts(name, before_counts[name], after_counts[name])
        if comparison["status"] == "UNKNOWN":
            logger.warning(f"Row count of {name} is unknown; comparing its rows anyway")
            changed.append(name)
        elif comparison["status"] == "GROWN":
            logger.info(
                f"{name}: {comparison['before_count']} -> {comparison['after_count']} rows "
                f"(+{comparison['difference']})"
            )
            changed.append(name)
        elif comparison["status"] == "SHRUNK":
            logger.debug(f"{name} lost {-comparison['difference']} rows; deletions are not diffed")
    return changed
