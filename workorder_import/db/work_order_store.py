from __future__ import annotations

from typing import Any

from psycopg2 import sql
from psycopg2.extras import Json

from ..models.work_order import PersistedWorkOrder, WorkOrderDTO

"""Work-order persistence on a psycopg2 cursor.

One INSERT per DTO with RETURNING of the store-assigned identity and
timestamps. The caller owns the transaction (BEGIN/SAVEPOINT/COMMIT); this
module never commits. Any driver failure is wrapped in WorkOrderCreateError so
the committer can treat it as a record-level error.
"""

__all__ = [
    "DEFAULT_TABLE",
    "WorkOrderCreateError",
    "INSERT_COLUMNS",
    "work_order_row",
    "insert_work_order",
]

DEFAULT_TABLE = "work_orders"

INSERT_COLUMNS: tuple[str, ...] = (
    "management_number",
    "request_date",
    "work_type",
    "operation_team",
    "ru_operation_team",
    "category",
    "equipment_type",
    "equipment_name",
    "service_type",
    "co_site_count_5g",
    "concentrator_name_5g",
    "du_id",
    "du_name",
    "channel_card",
    "port",
    "line_number",
    "representative_ru_id",
    "ru_info_list",
    "service_location",
    "mux_info",
    "notes",
    "status",
    "priority",
    "created_by",
    "label_printed",
    "customer_name",
    "team",
    "metadata",
)


class WorkOrderCreateError(Exception):
    def __init__(self, management_number: str, message: str) -> None:
        super().__init__(message)
        self.management_number = management_number


def work_order_row(dto: WorkOrderDTO) -> tuple[Any, ...]:
    """Column values of a DTO in INSERT_COLUMNS order."""
    values = {
        "management_number": dto.management_number,
        "request_date": dto.request_date,
        "work_type": dto.work_type.value,
        "operation_team": dto.operation_team,
        "ru_operation_team": dto.operation_team,
        "category": dto.category,
        "equipment_type": dto.equipment_type,
        "equipment_name": dto.equipment_name,
        "service_type": dto.service_type,
        "co_site_count_5g": dto.co_site_count_5g,
        "concentrator_name_5g": dto.concentrator_name_5g,
        "du_id": dto.du_id,
        "du_name": dto.du_name,
        "channel_card": dto.channel_card,
        "port": dto.port,
        "line_number": dto.line_number,
        "representative_ru_id": dto.representative_ru_id,
        "ru_info_list": Json([ru.to_dict() for ru in dto.ru_info_list]),
        "service_location": dto.service_location,
        "mux_info": Json(dto.mux_info.to_dict()),
        "notes": dto.notes,
        "status": dto.status.value,
        "priority": dto.priority,
        "created_by": dto.created_by,
        "label_printed": False,
        # 구 스키마 호환 컬럼
        "customer_name": dto.management_number,
        "team": dto.operation_team,
        "metadata": Json(dto.metadata),
    }
    return tuple(values[c] for c in INSERT_COLUMNS)


def _insert_statement(table: str) -> sql.Composed:
    return sql.SQL("INSERT INTO {table} ({cols}) VALUES ({vals}) RETURNING id, created_at, updated_at").format(
        table=sql.Identifier(table),
        cols=sql.SQL(", ").join(sql.Identifier(c) for c in INSERT_COLUMNS),
        vals=sql.SQL(", ").join(sql.Placeholder() for _ in INSERT_COLUMNS),
    )


def insert_work_order(cursor: Any, dto: WorkOrderDTO, table: str = DEFAULT_TABLE) -> PersistedWorkOrder:
    """Create one work order inside the caller's transaction."""
    try:
        cursor.execute(_insert_statement(table), work_order_row(dto))
        returned = cursor.fetchone()
    except Exception as e:
        raise WorkOrderCreateError(dto.management_number, str(e).strip()) from e
    if returned is None:
        raise WorkOrderCreateError(dto.management_number, "INSERT returned no row")
    wo_id, created_at, updated_at = returned[0], returned[1], returned[2]
    return PersistedWorkOrder(dto=dto, id=wo_id, created_at=created_at, updated_at=updated_at)
