from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Per-run error log for the work-order importer.

Format rejections, synthesis failures and record/transaction errors are
collected as ErrorRecords while the batches of a run are processed, and written
once as JSON Lines to `logs/errors-YYYYMMDD-HHMMSS.log`. The stamp is the run
start (UTC), so the log file can be matched with the SUMMARY line of the same
run. Nothing is created for a run without errors.
"""

__all__ = [
    "ErrorLogBuffer",
    "error_log_path",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


def error_log_path(logs_dir: Path, started_at: datetime) -> Path:
    stamp = started_at.astimezone(UTC).strftime(TIMESTAMP_FMT)
    return logs_dir / f"errors-{stamp}.log"


class ErrorLogBuffer:
    """Collects ErrorRecords of one run; flush() appends them as JSON Lines."""

    def __init__(self, logs_dir: Path = LOGS_DIR, started_at: datetime | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self.file_path = error_log_path(logs_dir, started_at or datetime.now(UTC))

    @property
    def records(self) -> list[ErrorRecord]:
        return list(self._records)

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:
        return len(self._records)

    def count_by_type(self) -> dict[str, int]:
        """Buffered records per error_type, in first-seen order."""
        return dict(Counter(r.error_type for r in self._records))

    def flush(self) -> Path | None:
        """Append buffered records to the log file; None when nothing was buffered."""
        if not self._records:
            return None
        self.file_path.parent.mkdir(parents=True, exist_ok=True)
        with self.file_path.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return self.file_path
