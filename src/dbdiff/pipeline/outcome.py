"""
Per-table outcomes and the run summary built from them.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class TableStatus(str, Enum):
    SUCCESS = "SUCCESS"
    SKIPPED = "SKIPPED"
    FAILED = "FAILED"


@dataclass
class TableOutcome:
    """Result of diffing one candidate table."""

    table: str
    status: TableStatus
    reason: str | None = None
    new_rows: int = 0
    statements: int = 0
    duration_seconds: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "table": self.table,
            "status": self.status.value,
            "reason": self.reason,
            "new_rows": self.new_rows,
            "statements": self.statements,
            "duration_seconds": round(self.duration_seconds, 3),
        }


@dataclass
class RunSummary:
    """Outcomes of every candidate table plus the row-count comparisons."""

    outcomes: list[TableOutcome] = field(default_factory=list)
    comparisons: list[dict[str, Any]] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    finished_at: datetime | None = None

    def add(self, outcome: TableOutcome) -> None:
        self.outcomes.append(outcome)

    def _with_status(self, status: TableStatus) -> list[TableOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def succeeded(self) -> list[TableOutcome]:
        return self._with_status(TableStatus.SUCCESS)

    @property
    def skipped(self) -> list[TableOutcome]:
        return self._with_status(TableStatus.SKIPPED)

    @property
    def failed(self) -> list[TableOutcome]:
        return self._with_status(TableStatus.FAILED)

    @property
    def total_new_rows(self) -> int:
        return sum(o.new_rows for o in self.outcomes)

    @property
    def total_statements(self) -> int:
        return sum(o.statements for o in self.outcomes)

    @property
    def exit_code(self) -> int:
        """0 when no table failed, 1 otherwise."""
        return 1 if self.failed else 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "outcomes": [o.to_dict() for o in self.outcomes],
            "comparisons": self.comparisons,
            "total_new_rows": self.total_new_rows,
            "total_statements": self.total_statements,
        }
