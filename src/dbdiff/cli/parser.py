"""
Command-line argument parser configuration.
"""

import argparse

SNAPSHOT_SIDES = ("before", "after")


def _add_snapshot_arguments(parser: argparse.ArgumentParser, side: str) -> None:
    group = parser.add_argument_group(f"{side} snapshot")
    env_prefix = f"DBDIFF_{side.upper()}"
    group.add_argument(f"--{side}-host", help=f"{side} database host (env: {env_prefix}_HOST)")
    group.add_argument(
        f"--{side}-port", type=int, help=f"{side} database port (env: {env_prefix}_PORT)"
    )
    group.add_argument(
        f"--{side}-database", help=f"{side} database name (env: {env_prefix}_DATABASE)"
    )
    group.add_argument(f"--{side}-user", help=f"{side} database user (env: {env_prefix}_USER)")
    group.add_argument(
        f"--{side}-password", help=f"{side} database password (env: {env_prefix}_PASSWORD)"
    )


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="dbdiff",
        description="Reconstruct INSERT statements for rows added between two database snapshots",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Diff two PostgreSQL snapshots, SQL to stdout
  dbdiff run --before-host db1 --before-database app_old \\
             --after-host db2 --after-database app_new > new_rows.sql

  # SQL Server snapshots, credentials from Vault, restricted to some tables
  dbdiff run --db-type sqlserver --use-vault --tables currency,country --output new_rows.sql

  # Keep going when one table fails, save a JSON report
  dbdiff run --tables-file tables.txt --continue-on-error --report run.json

  # Render a saved report
  dbdiff report --input run.json
        """,
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO, env: DBDIFF_LOG_LEVEL)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Write logs as JSON lines",
    )
    parser.add_argument(
        "--log-file",
        help="Also write logs to this file (rotated)",
    )
    parser.add_argument(
        "--otlp-endpoint",
        help="OTLP gRPC collector for traces (env: OTLP_ENDPOINT)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # ========== Run command ==========
    run_parser = subparsers.add_parser("run", help="Diff two snapshots and emit INSERT statements")
    run_parser.add_argument(
        "--db-type",
        choices=["postgresql", "sqlserver"],
        help="Dialect of both snapshots (default: postgresql, env: DBDIFF_DB_TYPE)",
    )
    run_parser.add_argument(
        "--schema",
        help="Schema to diff (default: public / dbo, env: DBDIFF_SCHEMA)",
    )
    run_parser.add_argument(
        "--tables",
        help="Comma-separated list of tables to diff (default: all)",
    )
    run_parser.add_argument(
        "--tables-file",
        help="File containing list of tables (one per line)",
    )
    run_parser.add_argument(
        "--output",
        help="Write SQL to this file instead of stdout",
    )
    run_parser.add_argument(
        "--report",
        help="Write a JSON run report to this file",
    )
    run_parser.add_argument(
        "--metrics-file",
        help="Write Prometheus metrics to this file",
    )
    run_parser.add_argument(
        "--continue-on-error",
        action="store_true",
        help="Record a failed table and continue with the remaining ones",
    )
    run_parser.add_argument(
        "--statement-timeout",
        type=int,
        help="Per-statement timeout in seconds",
    )
    run_parser.add_argument(
        "--use-vault",
        action="store_true",
        help="Fetch credentials from HashiCorp Vault (secret/dbdiff/before, secret/dbdiff/after)",
    )
    for side in SNAPSHOT_SIDES:
        _add_snapshot_arguments(run_parser, side)

    # ========== Report command ==========
    report_parser = subparsers.add_parser("report", help="Show a report from a previous run")
    report_parser.add_argument(
        "--input",
        required=True,
        help="Input JSON report file",
    )

    return parser
