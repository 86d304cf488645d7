"""
CLI command implementations.

- run: diff two snapshots and write INSERT statements
- report: render a JSON report of a previous run
"""

import argparse
import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TextIO

from utils.metrics import write_metrics_file

from ..catalog.connection import open_snapshot
from ..errors import DbDiffError
from ..pipeline import DiffPipeline, StreamSink
from ..report import export_report_json, format_report_console, generate_report, load_report_json
from .credentials import (
    ConfigurationError,
    get_snapshot_configs,
    resolve_db_type,
    resolve_schema,
    resolve_tables,
)

logger = logging.getLogger(__name__)


@contextmanager
def _open_output(path: str | None) -> Iterator[TextIO]:
    if path is None:
        yield sys.stdout
        sys.stdout.flush()
        return
    with open(path, "w", encoding="utf-8") as f:
        yield f


def cmd_run(args: argparse.Namespace) -> int:
    """
    Diff the before and after snapshots

    Args:
        args: Parsed command-line arguments

    Returns:
        Process exit status (0 = every table succeeded or was skipped)
    """
    try:
        db_type = resolve_db_type(args)
        schema = resolve_schema(args, db_type)
        tables = resolve_tables(args)
        before_config, after_config = get_snapshot_configs(args)
    except (ConfigurationError, OSError) as e:
        logger.error(f"Configuration error: {e}")
        return 1

    logger.info(
        f"Diffing {db_type.value} schema {schema}: "
        f"{before_config.database}@{before_config.host} -> {after_config.database}@{after_config.host}"
    )

    snapshots = []
    try:
        before = open_snapshot("before", before_config, db_type, schema, args.statement_timeout)
        snapshots.append(before)
        after = open_snapshot("after", after_config, db_type, schema, args.statement_timeout)
        snapshots.append(after)

        with _open_output(args.output) as stream:
            pipeline = DiffPipeline(
                before,
                after,
                StreamSink(stream),
                schema=schema,
                continue_on_error=args.continue_on_error,
                tables=tables,
            )
            summary = pipeline.run()
    except DbDiffError as e:
        logger.error(f"Run aborted: {e}")
        return 1
    finally:
        for snapshot in snapshots:
            snapshot.close()
        if args.metrics_file:
            write_metrics_file(args.metrics_file)

    report = generate_report(summary)
    if args.report:
        export_report_json(report, args.report)
        logger.info(f"Report exported to {args.report}")

    for outcome in summary.failed:
        logger.error(f"  {outcome.table}: {outcome.reason}")
    logger.info(report["summary"])
    return summary.exit_code


def cmd_report(args: argparse.Namespace) -> int:
    """
    Print a report from a previous run

    Args:
        args: Parsed command-line arguments
    """
    logger.info(f"Loading report from {args.input}")
    try:
        report = load_report_json(args.input)
        print(format_report_console(report))
    except (OSError, json.JSONDecodeError, KeyError) as e:
        logger.error(f"Failed to process report: {e}")
        return 1
    return 0
