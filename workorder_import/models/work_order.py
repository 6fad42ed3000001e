from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

"""Work-order domain models.

One installation (group) always yields two WorkOrderDTOs: the DU side for the
central-office crew and the RU side for the field crew. Both share the same
ru_info_list and representative RU.
"""

__all__ = [
    "WorkType",
    "WorkOrderStatus",
    "RuElement",
    "MuxInfo",
    "WorkOrderDTO",
    "PersistedWorkOrder",
]


class WorkType(Enum):
    """Side of an installation a work order belongs to.

    The value is both the stored work_type and the management number suffix
    (`<base>_DU측`, `<base>_RU측`).
    """
    DU = "DU측"
    RU = "RU측"

    @property
    def suffix(self) -> str:
        return f"_{self.value}"


class WorkOrderStatus(Enum):
    # import 는 대기 상태로만 생성
    PENDING = "pending"


@dataclass(frozen=True)
class RuElement:
    """One physical RU of an installation (one input row)."""
    ru_id: str
    ru_name: str | None = None
    channel_card: str | None = None
    port: str | None = None
    service_type: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        # UI 호환 키 (camelCase)
        return {
            "ruId": self.ru_id,
            "ruName": self.ru_name,
            "channelCard": self.channel_card,
            "port": self.port,
            "serviceType": self.service_type,
        }


@dataclass(frozen=True)
class MuxInfo:
    """Transport equipment descriptors, passed through untouched."""
    lte_mux: str | None = None
    mux_type: str | None = None
    service_type: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "lteMux": self.lte_mux,
            "muxType": self.mux_type,
            "서비스구분": self.service_type,
        }


@dataclass(frozen=True)
class WorkOrderDTO:
    """Synthesized work order, not yet persisted."""
    management_number: str  # base management number + side suffix
    work_type: WorkType
    operation_team: str
    created_by: int
    request_date: str | None = None
    equipment_name: str | None = None
    equipment_type: str | None = None
    category: str | None = None
    service_type: str | None = None
    concentrator_name_5g: str | None = None
    co_site_count_5g: str | None = None
    ru_info_list: list[RuElement] = field(default_factory=list)
    representative_ru_id: str | None = None
    mux_info: MuxInfo = field(default_factory=MuxInfo)
    line_number: str | None = None
    du_id: str | None = None
    du_name: str | None = None
    channel_card: str | None = None
    port: str | None = None
    service_location: str | None = None  # RU side only
    notes: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    status: WorkOrderStatus = WorkOrderStatus.PENDING
    priority: str = "normal"

    @property
    def id(self) -> str:
        return self.management_number

    @property
    def base_management_number(self) -> str:
        return self.management_number.removesuffix(self.work_type.suffix)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "managementNumber": self.management_number,
            "requestDate": self.request_date,
            "workType": self.work_type.value,
            "operationTeam": self.operation_team,
            "equipmentName": self.equipment_name,
            "equipmentType": self.equipment_type,
            "category": self.category,
            "serviceType": self.service_type,
            "concentratorName5G": self.concentrator_name_5g,
            "coSiteCount5G": self.co_site_count_5g,
            "ruInfoList": [ru.to_dict() for ru in self.ru_info_list],
            "representativeRuId": self.representative_ru_id,
            "muxInfo": self.mux_info.to_dict(),
            "lineNumber": self.line_number,
            "duId": self.du_id,
            "duName": self.du_name,
            "channelCard": self.channel_card,
            "port": self.port,
            "serviceLocation": self.service_location,
            "notes": self.notes,
            "status": self.status.value,
            "priority": self.priority,
            "createdBy": self.created_by,
        }


@dataclass(frozen=True)
class PersistedWorkOrder:
    """A DTO after a successful create, carrying the store identity."""
    dto: WorkOrderDTO
    id: int | None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def management_number(self) -> str:
        return self.dto.management_number

    def to_dict(self) -> dict[str, Any]:
        data = self.dto.to_dict()
        data["id"] = self.id
        data["createdAt"] = self.created_at.isoformat() if self.created_at else None
        data["updatedAt"] = self.updated_at.isoformat() if self.updated_at else None
        return data

