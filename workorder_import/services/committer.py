from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from ..db.work_order_store import DEFAULT_TABLE, WorkOrderCreateError, insert_work_order
from ..logging.error_log import ErrorLogBuffer
from ..models.error_record import RECORD_CREATE_ERROR, TRANSACTION_ERROR, ErrorRecord
from ..models.processing_result import CommitResult
from ..models.work_order import PersistedWorkOrder, WorkOrderDTO

"""Persist one batch of work orders in a single transaction.

A failed create (constraint violation, bad value) is rolled back to a
per-record savepoint, recorded, and the loop moves on; the batch still commits.
Any failure outside the per-record block (BEGIN, SAVEPOINT, COMMIT, a dead
connection) rolls back the whole transaction and nothing of the batch is kept.
"""

__all__ = [
    "commit_work_orders",
]

logger = logging.getLogger(__name__)

SAVEPOINT = "work_order_create"


def _log_error(
    error_log: ErrorLogBuffer | None, file_name: str, management_number: str, error_type: str, message: str
) -> None:
    if error_log is None:
        return
    error_log.append(
        ErrorRecord.create(
            file=file_name,
            management_number=management_number,
            row=-1,
            error_type=error_type,
            message=message,
        )
    )


def commit_work_orders(
    cursor: Any,
    dtos: Sequence[WorkOrderDTO],
    *,
    table: str = DEFAULT_TABLE,
    error_log: ErrorLogBuffer | None = None,
    file_name: str = "",
) -> CommitResult:
    """Create every DTO inside one transaction with per-record partial failure.

    Args:
        cursor: psycopg2 cursor on a connection in autocommit mode (the
            transaction is driven by explicit BEGIN/COMMIT). None = mock mode:
            nothing is written and every DTO counts as created without an id.
        dtos: Work orders in creation order
        table: Target table name
        error_log: Buffer receiving one ErrorRecord per failure
        file_name: Source file name for error records

    Returns:
        CommitResult with created records, ordered error messages and the
        rolled_back flag
    """
    total = len(dtos)
    if cursor is None:
        logger.debug("mock mode: %d work order(s) not written", total)
        return CommitResult(
            total_processed=total,
            created=[PersistedWorkOrder(dto=dto, id=None) for dto in dtos],
            errors=[],
        )

    created: list[PersistedWorkOrder] = []
    errors: list[str] = []
    try:
        cursor.execute("BEGIN")
        for dto in dtos:
            cursor.execute(f"SAVEPOINT {SAVEPOINT}")
            try:
                record = insert_work_order(cursor, dto, table=table)
            except WorkOrderCreateError as e:
                # 해당 레코드만 되돌리고 계속 진행
                cursor.execute(f"ROLLBACK TO SAVEPOINT {SAVEPOINT}")
                message = f"work order {e.management_number} create failed: {e}"
                logger.warning(message)
                errors.append(message)
                _log_error(error_log, file_name, e.management_number, RECORD_CREATE_ERROR, str(e))
                continue
            cursor.execute(f"RELEASE SAVEPOINT {SAVEPOINT}")
            created.append(record)
        cursor.execute("COMMIT")
    except Exception as e:
        try:
            cursor.execute("ROLLBACK")
        except Exception as rollback_e:
            logger.error("rollback failed: %s", rollback_e)
            _log_error(error_log, file_name, "", TRANSACTION_ERROR, f"rollback failed: {rollback_e}")
        message = f"transaction failed, batch rolled back: {e}"
        logger.error(message)
        errors.append(message)
        _log_error(error_log, file_name, "", TRANSACTION_ERROR, str(e))
        return CommitResult(
            total_processed=total,
            created=[],
            errors=errors,
            rolled_back=True,
            fatal_error=str(e),
        )

    logger.info("committed %d/%d work order(s) errors=%d", len(created), total, len(errors))
    return CommitResult(total_processed=total, created=created, errors=errors)
