"""
Diff pipeline driver, per-table outcomes and output sinks.
"""

from .outcome import RunSummary, TableOutcome, TableStatus
from .runner import DiffPipeline
from .sink import OutputSink, StreamSink

__all__ = [
    "DiffPipeline",
    "OutputSink",
    "StreamSink",
    "RunSummary",
    "TableOutcome",
    "TableStatus",
]
