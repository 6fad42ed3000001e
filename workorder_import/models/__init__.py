"""Domain models for the work-order CSV importer.

This package contains the dataclasses passed between pipeline stages: rows,
groups, work orders, error records and the batch/run results.
"""

from .config_models import ColumnNames, DatabaseConfig, ImportConfig
from .group import Group
from .processing_result import BatchState, CommitResult, ImportResult, SynthesisResult
from .row_data import NormalizedRow, RawRow
from .work_order import MuxInfo, PersistedWorkOrder, RuElement, WorkOrderDTO, WorkType

__all__ = [
    # Configuration models
    "ColumnNames",
    "DatabaseConfig",
    "ImportConfig",
    # Pipeline models
    "RawRow",
    "NormalizedRow",
    "Group",
    "RuElement",
    "MuxInfo",
    "WorkType",
    "WorkOrderDTO",
    "PersistedWorkOrder",
    # Results
    "BatchState",
    "SynthesisResult",
    "CommitResult",
    "ImportResult",
]
