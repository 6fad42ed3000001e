from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from .work_order import PersistedWorkOrder, WorkOrderDTO

"""Processing result models for the work-order importer.

ImportResult is the per-batch (per-file) outcome and renders the response
object handed to the caller. ProcessingResult aggregates a whole CLI run for
the SUMMARY line.
"""

__all__ = [
    "BatchState",
    "SynthesisResult",
    "CommitResult",
    "ImportResult",
    "FileStat",
    "ProcessingResult",
]

RESPONSE_SAMPLE_SIZE = 5


class BatchState(Enum):
    """Lifecycle of one uploaded batch.

    State transitions (forward only, single pass):
    received → decoded → parsed → normalized → grouped → synthesized
    → committing → (committed | rolled_back)

    REJECTED ends a batch whose file failed the format check; nothing was
    persisted and no partial data is returned.
    """
    RECEIVED = "received"
    DECODED = "decoded"
    PARSED = "parsed"
    NORMALIZED = "normalized"
    GROUPED = "grouped"
    SYNTHESIZED = "synthesized"
    COMMITTING = "committing"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (BatchState.COMMITTED, BatchState.ROLLED_BACK, BatchState.REJECTED)


@dataclass(frozen=True)
class SynthesisResult:
    dtos: list[WorkOrderDTO]
    errors: list[str]


@dataclass(frozen=True)
class CommitResult:
    """Outcome of the persistence stage for one batch."""
    total_processed: int
    created: list[PersistedWorkOrder]
    errors: list[str]
    rolled_back: bool = False
    fatal_error: str | None = None

    def summary(self) -> dict[str, int]:
        return {
            "total_processed": self.total_processed,
            "created": len(self.created),
            "errors": len(self.errors),
        }


@dataclass
class ImportResult:
    """Outcome of one batch, from decode to commit/rollback."""
    file_name: str
    states: list[BatchState] = field(default_factory=lambda: [BatchState.RECEIVED])
    total_processed: int = 0
    created: list[PersistedWorkOrder] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    error: str | None = None  # 실패 응답 제목
    details: str | None = None
    finished_at: datetime | None = None

    @property
    def state(self) -> BatchState:
        return self.states[-1]

    @property
    def success(self) -> bool:
        return self.state == BatchState.COMMITTED

    def advance(self, state: BatchState) -> None:
        """Move to the next state; moving backwards or out of a final state is a bug."""
        current = self.state
        order = list(BatchState)
        if current.is_terminal or order.index(state) <= order.index(current):
            raise ValueError(f"illegal batch transition {current.value} -> {state.value}")
        self.states.append(state)
        if state.is_terminal:
            self.finished_at = datetime.now(UTC)

    def summary(self) -> dict[str, int]:
        return {
            "total_processed": self.total_processed,
            "created": len(self.created),
            "errors": len(self.errors),
        }

    def to_response(self) -> dict[str, Any]:
        """Render the structured result returned to the transport layer."""
        ts = (self.finished_at or datetime.now(UTC)).isoformat().replace("+00:00", "Z")
        if not self.success:
            return {
                "success": False,
                "error": self.error,
                "details": self.details,
                "timestamp": ts,
            }
        data: dict[str, Any] = {
            "workOrders": [wo.to_dict() for wo in self.created[:RESPONSE_SAMPLE_SIZE]],
        }
        if self.errors:
            data["processingErrors"] = list(self.errors)
        return {
            "success": True,
            "message": f"{len(self.created)}개의 작업지시가 생성되었습니다",
            "summary": self.summary(),
            "data": data,
            "timestamp": ts,
        }


@dataclass(frozen=True)
class FileStat:
    """Per-file processing statistics (internal helper for ProcessingResult)."""
    file_name: str
    state: str  # committed / rolled_back / rejected
    total_processed: int
    created: int
    errors: int
    elapsed_seconds: float


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results of one CLI run, used for the SUMMARY line."""
    committed_files: int
    failed_files: int  # rejected or rolled back
    total_processed: int
    total_created: int
    total_errors: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None
    results: list[ImportResult] | None = None
