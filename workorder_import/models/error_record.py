from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for error logging.

This module defines the ErrorRecord dataclass used for structured error logging
of an import run. row=-1 is the sentinel for errors that are not tied to one
input row (group synthesis, record creation, transaction), and an empty
management_number marks file-level errors.
"""

__all__ = [
    "ErrorRecord",
    "FORMAT_ERROR",
    "SYNTHESIS_ERROR",
    "RECORD_CREATE_ERROR",
    "TRANSACTION_ERROR",
    "PROCESSING_ERROR",
]

FORMAT_ERROR = "FORMAT_ERROR"
SYNTHESIS_ERROR = "SYNTHESIS_ERROR"
RECORD_CREATE_ERROR = "RECORD_CREATE_ERROR"
TRANSACTION_ERROR = "TRANSACTION_ERROR"
PROCESSING_ERROR = "PROCESSING_ERROR"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: CSV filename being processed
        management_number: Group key or work-order management number ("" if file-level)
        row: Row number (1-based). Use -1 when no single row applies
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Driver error message or description
    """
    timestamp: str  # ISO8601 UTC
    file: str
    management_number: str
    row: int  # 행 번호. 특정 불가 시 -1
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(
        file: str, management_number: str, row: int, error_type: str, message: str
    ) -> ErrorRecord:
        """Create a new ErrorRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            management_number=management_number,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize ErrorRecord to JSON Lines format (fixed key set)."""
        return json.dumps(asdict(self), ensure_ascii=False)
