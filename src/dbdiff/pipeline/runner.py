"""
Diff pipeline driver.

Runs change detection over both snapshots, then diffs candidate tables one
at a time and streams their INSERT statements to the sink. Failures local to
one table become a TableOutcome; everything else propagates.
"""

import logging
import time
from collections.abc import Iterable
from datetime import UTC, datetime

from opentelemetry import trace

from utils.tracing import add_span_attributes, trace_operation

from ..catalog.connection import Snapshot
from ..compare.counts import collect_row_counts, compare_row_counts, find_tables_with_changes
from ..errors import SnapshotQueryError, UnsafeLiteralError, UnsupportedColumnTypeError
from ..metrics import STATEMENTS_EMITTED, TABLE_DIFF_TIME, TABLES_PROCESSED
from ..row_level.differ import RowSetDiffer
from ..row_level.emitter import emit_change_set
from ..row_level.materializer import RowMaterializer
from ..schema.resolver import resolve_table
from .outcome import RunSummary, TableOutcome, TableStatus
from .sink import OutputSink

logger = logging.getLogger(__name__)


class DiffPipeline:
    """Reconstructs INSERTs for rows added between two snapshots."""

    def __init__(
        self,
        before: Snapshot,
        after: Snapshot,
        sink: OutputSink,
        schema: str | None = None,
        continue_on_error: bool = False,
        tables: Iterable[str] | None = None,
    ):
        """
        Args:
            before: Snapshot the statements would be applied to
            after: Snapshot holding the new rows
            sink: Destination of generated statements
            schema: Schema qualifying data queries (None = connection default)
            continue_on_error: Record query/encoding failures per table and keep going
            tables: Optional allow-list of table names
        """
        if before.db_type != after.db_type:
            raise ValueError(
                f"Snapshots must share a dialect: before={before.db_type.value}, "
                f"after={after.db_type.value}"
            )
        self.before = before
        self.after = after
        self.sink = sink
        self.db_type = before.db_type
        self.schema = schema
        self.continue_on_error = continue_on_error
        self.tables = list(tables) if tables is not None else None

        self.differ = RowSetDiffer(before.executor, after.executor, self.db_type, schema)
        self.materializer = RowMaterializer(after.executor, self.db_type, schema)

    def run(self) -> RunSummary:
        """
        Diff every changed table.

        Raises:
            SnapshotQueryError: On a query failure when not continuing on error
            UnsafeLiteralError: On an unencodable value when not continuing on error
        """
        summary = RunSummary()
        with trace_operation("diff_run", kind=trace.SpanKind.INTERNAL, db_system=self.db_type.value):
            before_counts = collect_row_counts(
                self.before.catalog, self.tables, tolerate_errors=self.continue_on_error
            )
            after_counts = collect_row_counts(
                self.after.catalog, self.tables, tolerate_errors=self.continue_on_error
            )
            if self.tables is not None:
                missing = sorted(set(self.tables) - set(before_counts) - set(after_counts))
                for name in missing:
                    logger.warning(f"Requested table {name} exists in neither snapshot")

            summary.comparisons = [
                compare_row_counts(name, before_counts[name], after_counts[name])
                for name in sorted(set(before_counts) & set(after_counts))
            ]
            candidates = find_tables_with_changes(before_counts, after_counts)
            logger.info(f"{len(candidates)} of {len(summary.comparisons)} tables have new rows")

            for name in candidates:
                summary.add(self.process_table(name))

            add_span_attributes(
                tables=len(candidates),
                statements=summary.total_statements,
                failed=len(summary.failed),
            )

        summary.finished_at = datetime.now(UTC)
        return summary

    def process_table(self, name: str) -> TableOutcome:
        """Diff one table and write its statements to the sink."""
        start = time.monotonic()
        outcome = TableOutcome(table=name, status=TableStatus.SUCCESS)

        with trace_operation("diff_table", kind=trace.SpanKind.INTERNAL, table=name):
            with TABLE_DIFF_TIME.labels(table=name).time():
                try:
                    table = resolve_table(self.before.catalog, name, self.db_type)
                    change_set = self.differ.find_new_rows(table)
                    outcome.new_rows = len(change_set)

                    for statement in emit_change_set(change_set, self.materializer, self.db_type):
                        self.sink.write(statement)
                        outcome.statements += 1
                        STATEMENTS_EMITTED.labels(table=name).inc()

                except UnsupportedColumnTypeError as e:
                    logger.warning(f"Skipping {name}: {e}")
                    outcome.status = TableStatus.SKIPPED
                    outcome.reason = str(e)

                except (SnapshotQueryError, UnsafeLiteralError) as e:
                    if not self.continue_on_error:
                        raise
                    logger.error(
                        f"Table {name} failed after {outcome.statements} statements: {e}",
                        extra={"table": name, "error_type": type(e).__name__},
                    )
                    outcome.status = TableStatus.FAILED
                    outcome.reason = str(e)

        outcome.duration_seconds = time.monotonic() - start
        TABLES_PROCESSED.labels(status=outcome.status.value).inc()
        return outcome
