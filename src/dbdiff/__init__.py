"""
dbdiff: reconstruct INSERT statements for rows added between two snapshots

Compares a "before" and an "after" snapshot of the same schema and emits the
SQL that brings the before snapshot up to date with rows inserted in the
after snapshot.

Components:
- compare: Row count collection and changed-table detection
- schema: Table/column metadata and identity column resolution
- catalog: Catalog introspection, query execution, connections
- row_level: Key-set diffing, row materialization, INSERT emission
- pipeline: Per-table driver, outcomes, output sinks
- report: Run report generation and formatting
- cli: Command-line entry point

Usage:
    from dbdiff.catalog import open_snapshot
    from dbdiff.pipeline import DiffPipeline, StreamSink
"""

__version__ = "1.0.0"
__all__ = ["compare", "schema", "catalog", "row_level", "pipeline", "report", "cli"]
