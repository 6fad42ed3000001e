from __future__ import annotations

from dataclasses import dataclass, field, fields

"""Config dataclasses for the work-order CSV importer.

The loader in workorder_import/config/loader.py builds these from YAML after
schema validation. Column labels default to the headers of the operations
export; any of them can be overridden under the `columns` key.
"""

__all__ = [
    "ColumnNames",
    "DatabaseConfig",
    "ImportConfig",
    "DEFAULT_NULL_SENTINELS",
]

DEFAULT_NULL_SENTINELS: frozenset[str] = frozenset({"undefined", "-"})


@dataclass(frozen=True)
class ColumnNames:
    """Header labels of the input file, keyed by role.

    The management number and RU id labels double as the format markers: a
    header missing either one is rejected before any row is read.
    """
    management_number: str = "관리번호"
    request_date: str = "요청일"
    du_team: str = "DU운용팀"
    du_owner: str = "DU담당자"
    ru_team: str = "RU운용팀"
    ru_owner: str = "RU담당자"
    category: str = "구분"
    ru_id: str = "RU_ID"
    ru_name: str = "RU_명"
    co_site_count: str = "co-SITE 수량"
    concentrator_name: str = "5G 집중국명"
    line_number: str = "회선번호"
    lte_mux: str = "(LTE MUX / 국간,간선망)"
    mux_type: str = "MUX종류"
    service_type: str = "서비스구분"
    region: str = "시/도"
    sub_region: str = "시/군/구"
    neighborhood: str = "읍/면/동(리)"
    lot: str = "번지"
    building: str = "건물명"
    site_note: str = "장비위치"
    remark: str = "비고"
    du_id: str = "DUID"
    du_name: str = "DU명"
    channel_card: str = "채널카드"
    port: str = "포트"

    @property
    def marker_columns(self) -> tuple[str, str]:
        return (self.management_number, self.ru_id)

    @property
    def team_columns(self) -> tuple[str, str]:
        return (self.du_team, self.ru_team)

    @property
    def address_columns(self) -> tuple[str, ...]:
        # 서비스 위치 조합 순서
        return (
            self.region,
            self.sub_region,
            self.neighborhood,
            self.lot,
            self.building,
            self.site_note,
        )

    @classmethod
    def role_names(cls) -> set[str]:
        return {f.name for f in fields(cls)}

    @classmethod
    def from_overrides(cls, overrides: dict[str, str] | None) -> ColumnNames:
        if not overrides:
            return cls()
        unknown = set(overrides) - cls.role_names()
        if unknown:
            raise ValueError(f"unknown column roles: {sorted(unknown)}")
        return cls(**overrides)


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for an import run."""
    source_directory: str  # Directory scanned for .csv exports
    created_by: int  # users.id stamped on every created work order
    encoding: str = "cp949"  # Primary codec (EUC-KR superset); UTF-8 is the fallback
    default_team: str = "기타"  # Team used when a side never declared one
    table: str = "work_orders"
    null_sentinels: frozenset[str] = DEFAULT_NULL_SENTINELS
    columns: ColumnNames = field(default_factory=ColumnNames)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
