from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""Submission result models for bulk employee registration.

BulkResult mirrors one entry of the backend's ``results`` array. RowCounts and
SubmissionOutcome aggregate a session for operator display and the SUMMARY
line.
"""

__all__ = [
    "BulkResult",
    "RowCounts",
    "SubmissionOutcome",
]


@dataclass(frozen=True)
class BulkResult:
    """Per-row outcome reported by the backend (display only)."""
    row: int  # backend row number within the submitted batch
    employee_id: str
    email: str
    success: bool
    error: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> BulkResult:
        try:
            row = int(data.get("row", -1))
        except (TypeError, ValueError):
            row = -1
        error = data.get("error")
        return cls(
            row=row,
            employee_id=str(data.get("employeeId") or ""),
            email=str(data.get("email") or ""),
            success=bool(data.get("success", False)),
            error=str(error) if error else None,
        )


@dataclass(frozen=True)
class RowCounts:
    """Row totals surfaced to the operator before submission."""
    total: int
    valid: int
    invalid: int


@dataclass(frozen=True)
class SubmissionOutcome:
    """Aggregated result of one submit (or dry run) of a bulk session."""
    counts: RowCounts
    submitted: int  # rows actually sent (== counts.valid unless dry run)
    results: tuple[BulkResult, ...] = ()
    elapsed_seconds: float = 0.0
    dry_run: bool = False

    @property
    def excluded(self) -> int:
        return self.counts.invalid

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @classmethod
    def preview(cls, counts: RowCounts) -> SubmissionOutcome:
        """Outcome for a dry run: nothing is sent."""
        return cls(counts=counts, submitted=0, dry_run=True)
