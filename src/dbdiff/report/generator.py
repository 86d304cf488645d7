"""
Run report generation.

Turns a RunSummary into a JSON-serializable report with an overall status
and a human-readable summary line.
"""

from datetime import UTC, datetime
from typing import Any

from ..pipeline.outcome import RunSummary


def _overall_status(summary: RunSummary) -> str:
    if summary.failed:
        return "FAIL"
    if summary.skipped:
        return "PARTIAL"
    return "PASS"


def _generate_summary(summary: RunSummary) -> str:
    """
    Generate human-readable summary

    Args:
        summary: Run summary

    Returns:
        Summary string
    """
    candidates = len(summary.outcomes)
    if candidates == 0:
        return f"No new rows in any of {len(summary.comparisons)} tables."

    text = (
        f"{summary.total_new_rows} new rows in {candidates} of "
        f"{len(summary.comparisons)} tables; {summary.total_statements} statements generated."
    )
    if summary.skipped:
        text += f" {len(summary.skipped)} table(s) skipped."
    if summary.failed:
        text += f" {len(summary.failed)} table(s) failed."
    return text


def generate_report(summary: RunSummary) -> dict[str, Any]:
    """
    Generate a run report

    Args:
        summary: Summary of a finished run

    Returns:
        Dictionary containing:
        - status: PASS, PARTIAL (tables skipped) or FAIL (tables failed)
        - total_tables: Number of tables present in both snapshots
        - tables_changed: Number of candidate tables
        - tables_succeeded / tables_skipped / tables_failed
        - total_new_rows, total_statements
        - tables: Per-table outcomes
        - comparisons: Row-count comparisons
        - summary: Human-readable summary
        - started_at, finished_at, timestamp
    """
    return {
        "status": _overall_status(summary),
        "total_tables": len(summary.comparisons),
        "tables_changed": len(summary.outcomes),
        "tables_succeeded": len(summary.succeeded),
        "tables_skipped": len(summary.skipped),
        "tables_failed": len(summary.failed),
        "total_new_rows": summary.total_new_rows,
        "total_statements": summary.total_statements,
        "tables": [o.to_dict() for o in summary.outcomes],
        "comparisons": summary.comparisons,
        "summary": _generate_summary(summary),
        "started_at": summary.started_at.isoformat(),
        "finished_at": summary.finished_at.isoformat() if summary.finished_at else None,
        "timestamp": datetime.now(UTC).isoformat(),
    }
