from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ImportErrorRecord model for error logging.

Structured record for the JSON Lines error log written during a bulk import
session. ``row=-1`` marks file-level or batch-level errors (parse failure,
reference data failure, submission failure) where no single row applies.
"""

__all__ = [
    "ImportErrorRecord",
]


@dataclass(frozen=True)
class ImportErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Spreadsheet filename being imported
        row: Spreadsheet row number (1-based, header is row 1). -1 when unknown
        field: Canonical field name the error belongs to, None for row/file errors
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human-readable description
    """
    timestamp: str  # ISO8601 UTC
    file: str
    row: int
    field: str | None
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(
        file: str, row: int, error_type: str, message: str, field: str | None = None
    ) -> ImportErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ImportErrorRecord(
            timestamp=ts,
            file=file,
            row=row,
            field=field,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # 追加キー阻止: dataclass -> dict して json.dumps
        return json.dumps(asdict(self), ensure_ascii=False)
