from __future__ import annotations

import logging
import re
from collections.abc import Mapping

from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import ColumnNames
from ..models.error_record import SYNTHESIS_ERROR, ErrorRecord
from ..models.group import Group
from ..models.processing_result import SynthesisResult
from ..models.row_data import NormalizedRow
from ..models.work_order import MuxInfo, RuElement, WorkOrderDTO, WorkType

"""Group -> paired DU/RU work orders.

Every group yields exactly two DTOs. They share one ru_info_list, one
representative RU, the MUX info and the line number; they differ in suffix,
team, equipment name, and the RU side alone carries the service location.
"""

__all__ = [
    "EQUIPMENT_TYPE",
    "CONCENTRATOR_PLACEHOLDER",
    "is_primary_ru",
    "select_representative",
    "build_ru_info_list",
    "build_service_location",
    "synthesize_group",
    "synthesize_all",
]

logger = logging.getLogger(__name__)

EQUIPMENT_TYPE = "5G 장비"
CONCENTRATOR_PLACEHOLDER = "N/A"

# 사이트 대표 RU 명명 규칙: ..._A, ... A, 32T_A
_PRIMARY_RU = re.compile(r"(^|[_\s-])(A|32T_A|_A)\b", re.IGNORECASE | re.ASCII)


def _first_non_empty(*values: str | None) -> str | None:
    for v in values:
        if v:
            return v
    return None


def is_primary_ru(ru_name: str | None) -> bool:
    if not ru_name:
        return False
    return _PRIMARY_RU.search(ru_name) is not None


def select_representative(ru_info_list: list[RuElement]) -> RuElement | None:
    """First element named like the site's "A" unit, else the first element."""
    for ru in ru_info_list:
        if is_primary_ru(ru.ru_name):
            return ru
    return ru_info_list[0] if ru_info_list else None


def build_ru_info_list(rows: list[NormalizedRow], columns: ColumnNames) -> list[RuElement]:
    elements = []
    for row in rows:
        ru_id = row.get(columns.ru_id)
        if not ru_id:
            continue
        elements.append(
            RuElement(
                ru_id=ru_id,
                ru_name=row.get(columns.ru_name),
                channel_card=row.get(columns.channel_card),
                port=row.get(columns.port),
                service_type=row.get(columns.service_type),
            )
        )
    return elements


def build_service_location(row: NormalizedRow, columns: ColumnNames) -> str | None:
    parts = [row.get(col) for col in columns.address_columns]
    location = " ".join(p for p in parts if p)
    return location or None


def synthesize_group(
    group: Group,
    *,
    created_by: int,
    default_team: str,
    columns: ColumnNames,
    source_file: str = "",
) -> tuple[WorkOrderDTO, WorkOrderDTO]:
    """Build the (DU side, RU side) work orders of one installation."""
    first = group.first_row
    base = group.base_key
    ru_info_list = build_ru_info_list(group.rows, columns)
    representative = select_representative(ru_info_list)
    logger.debug(
        "group=%s ru_count=%d representative=%s",
        base,
        len(ru_info_list),
        representative.ru_id if representative else None,
    )

    shared = dict(
        created_by=created_by,
        request_date=first.get(columns.request_date),
        equipment_type=EQUIPMENT_TYPE,
        category=first.get(columns.category),
        service_type=representative.service_type if representative else None,
        concentrator_name_5g=first.get(columns.concentrator_name) or CONCENTRATOR_PLACEHOLDER,
        co_site_count_5g=first.get(columns.co_site_count) or str(len(ru_info_list)),
        ru_info_list=ru_info_list,
        representative_ru_id=representative.ru_id if representative else None,
        mux_info=MuxInfo(
            lte_mux=first.get(columns.lte_mux),
            mux_type=first.get(columns.mux_type),
            service_type=first.get(columns.service_type),
        ),
        line_number=first.get(columns.line_number),
        du_id=first.get(columns.du_id),
        du_name=first.get(columns.du_name),
        channel_card=representative.channel_card if representative else None,
        port=representative.port if representative else None,
        notes=first.get(columns.remark),
        metadata={
            "duOwner": first.get(columns.du_owner),
            "ruOwner": first.get(columns.ru_owner),
            "sourceFile": source_file,
        },
    )

    du_dto = WorkOrderDTO(
        management_number=base + WorkType.DU.suffix,
        work_type=WorkType.DU,
        operation_team=group.du_team or default_team,
        equipment_name=_first_non_empty(
            first.get(columns.concentrator_name), first.get(columns.du_name), base
        ),
        **shared,
    )
    ru_dto = WorkOrderDTO(
        management_number=base + WorkType.RU.suffix,
        work_type=WorkType.RU,
        operation_team=group.ru_team or default_team,
        equipment_name=_first_non_empty(
            representative.ru_name if representative else None,
            representative.ru_id if representative else None,
            base,
        ),
        service_location=build_service_location(first, columns),
        **shared,
    )
    return du_dto, ru_dto


def synthesize_all(
    groups: Mapping[str, Group],
    *,
    created_by: int,
    default_team: str,
    columns: ColumnNames,
    source_file: str = "",
    error_log: ErrorLogBuffer | None = None,
) -> SynthesisResult:
    """Synthesize every group in order; a failing group is recorded and skipped."""
    dtos: list[WorkOrderDTO] = []
    errors: list[str] = []
    for base_key, group in groups.items():
        try:
            du_dto, ru_dto = synthesize_group(
                group,
                created_by=created_by,
                default_team=default_team,
                columns=columns,
                source_file=source_file,
            )
        except Exception as e:
            message = f"group {base_key} synthesis failed: {e}"
            logger.error(message)
            errors.append(message)
            if error_log is not None:
                error_log.append(
                    ErrorRecord.create(
                        file=source_file,
                        management_number=base_key,
                        row=group.rows[0].row_number if group.rows else -1,
                        error_type=SYNTHESIS_ERROR,
                        message=str(e),
                    )
                )
            continue
        dtos.extend((du_dto, ru_dto))
    logger.info("synthesized %d work order(s) from %d group(s)", len(dtos), len(groups))
    return SynthesisResult(dtos=dtos, errors=errors)
