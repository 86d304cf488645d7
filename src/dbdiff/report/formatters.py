"""
Report export and console formatting.
"""

import json
from typing import Any


def export_report_json(report: dict[str, Any], output_path: str) -> None:
    """
    Export report to JSON file

    Args:
        report: Report dictionary
        output_path: Path to output file
    """
    with open(output_path, "w") as f:
        json.dump(report, f, indent=2)


def load_report_json(input_path: str) -> dict[str, Any]:
    """Load a report written by export_report_json."""
    with open(input_path) as f:
        return json.load(f)


def format_report_console(report: dict[str, Any]) -> str:
    """
    Format report for console output

    Args:
        report: Report dictionary

    Returns:
        Formatted string for console display
    """
    lines = []

    lines.append("=" * 80)
    lines.append("SNAPSHOT DIFF REPORT")
    lines.append("=" * 80)
    lines.append(f"Status: {report['status']}")
    lines.append(f"Timestamp: {report['timestamp']}")
    lines.append(f"Total Tables: {report['total_tables']}")
    lines.append(f"Tables Changed: {report['tables_changed']}")
    lines.append(f"Tables Skipped: {report['tables_skipped']}")
    lines.append(f"Tables Failed: {report['tables_failed']}")
    lines.append(f"New Rows: {report['total_new_rows']:,}")
    lines.append(f"Statements: {report['total_statements']:,}")
    lines.append("")

    lines.append("SUMMARY")
    lines.append("-" * 80)
    lines.append(report["summary"])
    lines.append("")

    if report["tables"]:
        lines.append("TABLES")
        lines.append("-" * 80)
        for outcome in report["tables"]:
            lines.append(
                f"{outcome['table']:<40} {outcome['status']:<8} "
                f"new={outcome['new_rows']} statements={outcome['statements']}"
            )
            if outcome.get("reason"):
                lines.append(f"  Reason: {outcome['reason']}")
        lines.append("")

    lines.append("=" * 80)

    return "\n".join(lines)
