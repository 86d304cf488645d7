"""
Command-line interface for dbdiff.

Available commands:
- run: Diff two snapshots and write INSERT statements for new rows
- report: Show a report from a previous run
"""

import logging
import os
import sys

from utils.logging import setup_logging, shutdown_logging
from utils.tracing import initialize_tracing, shutdown_tracing

from .commands import cmd_report, cmd_run
from .credentials import ConfigurationError, get_snapshot_configs
from .parser import create_parser

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the dbdiff CLI"""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(
        level=args.log_level or os.getenv("DBDIFF_LOG_LEVEL", "INFO"),
        log_file=args.log_file,
        json_format=args.log_json,
    )

    if args.otlp_endpoint or os.getenv("OTLP_ENDPOINT"):
        initialize_tracing(otlp_endpoint=args.otlp_endpoint)

    try:
        if args.command == "run":
            if args.tables and args.tables_file:
                parser.error("--tables and --tables-file are mutually exclusive")
            status = cmd_run(args)
        elif args.command == "report":
            status = cmd_report(args)
        else:
            parser.print_help()
            status = 1
    finally:
        shutdown_tracing()
        shutdown_logging()

    sys.exit(status)


__all__ = [
    "main",
    "create_parser",
    "get_snapshot_configs",
    "ConfigurationError",
    "cmd_run",
    "cmd_report",
]


if __name__ == "__main__":
    main()
