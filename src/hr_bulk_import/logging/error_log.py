from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ImportErrorRecord

"""Error log buffering for bulk import sessions.

- JSON Lines, fixed schema (ImportErrorRecord keys only)
- One file per run: ``logs/import-errors-YYYYMMDD-HHMMSS.log`` (UTC)
- Records are buffered and written on flush(); nothing is created when the
  buffer was never used
"""

__all__ = [
    "ImportErrorRecord",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer for error records. Flush writes JSON Lines.

    スレッド安全性不要 (セッションは単一スレッドで操作される)。
    """

    def __init__(self, logs_dir: Path = LOGS_DIR) -> None:
        self._records: list[ImportErrorRecord] = []
        self._logs_dir = logs_dir
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"import-errors-{stamp}.log"
        return self._file_path

    @property
    def records(self) -> list[ImportErrorRecord]:
        return list(self._records)

    def append(self, record: ImportErrorRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Append buffered records to the log file; None when there was nothing to write."""
        if not self._records:
            return self._file_path
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
