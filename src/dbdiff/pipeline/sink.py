"""
Output sinks for generated statements.
"""

import sys
from typing import Protocol, TextIO


class OutputSink(Protocol):
    def write(self, statement: str) -> None: ...


class StreamSink:
    """Writes one statement per line to a text stream (stdout by default)."""

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream if stream is not None else sys.stdout
        self.count = 0

    def write(self, statement: str) -> None:
        self.stream.write(statement)
        self.stream.write("\n")
        self.count += 1

    def flush(self) -> None:
        self.stream.flush()
