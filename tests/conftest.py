# Shared pytest fixtures
from __future__ import annotations

import csv
import io
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from pathlib import Path

import psycopg2
import pytest

from workorder_import.logging.init import reset_logging
from workorder_import.models.config_models import ColumnNames, ImportConfig

COLUMNS = ColumnNames()
HEADER_ROLES = [
    "management_number",
    "request_date",
    "du_team",
    "du_owner",
    "ru_team",
    "ru_owner",
    "category",
    "ru_id",
    "ru_name",
    "co_site_count",
    "concentrator_name",
    "line_number",
    "lte_mux",
    "mux_type",
    "service_type",
    "region",
    "sub_region",
    "neighborhood",
    "lot",
    "building",
    "site_note",
    "remark",
    "du_id",
    "du_name",
    "channel_card",
    "port",
]

FIXED_NOW = datetime(2024, 5, 1, 9, 30, tzinfo=UTC)


@pytest.fixture(autouse=True)
def _clean_logging():
    # setup_logging() 이 propagate=False 로 바꾸므로 caplog 용으로 매번 되돌림
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(tmp_path: Path, monkeypatch) -> Path:
    (tmp_path / "config").mkdir()
    (tmp_path / "data").mkdir()
    (tmp_path / "logs").mkdir()
    monkeypatch.chdir(tmp_path)
    for var in ("DATABASE_URL", "PGDSN", "PGHOST", "PGPORT", "PGUSER", "PGPASSWORD", "PGDATABASE", "DISABLE_DB_CONNECT"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
created_by: 7
encoding: cp949
default_team: 기타
table: work_orders
null_sentinels: ["undefined", "-"]
database:
  host: localhost
  port: 5432
  user: workorder
  password: secret
  database: workorder
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def import_config(temp_workdir: Path) -> ImportConfig:
    return ImportConfig(source_directory=str(temp_workdir / "data"), created_by=7)


def _csv_text(rows: Iterable[dict[str, str]], roles: list[str]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow([getattr(COLUMNS, r) for r in roles])
    for row in rows:
        writer.writerow([row.get(r, "") for r in roles])
    return buf.getvalue()


@pytest.fixture()
def make_csv() -> Callable[..., str]:
    """Build export text from rows keyed by column role (full header by default)."""
    def build(rows: Iterable[dict[str, str]], roles: list[str] | None = None) -> str:
        return _csv_text(rows, roles or HEADER_ROLES)
    return build


@pytest.fixture()
def sample_rows() -> list[dict[str, str]]:
    # 2개 그룹: 2024-001 (RU 2대, 대표는 _A), 2024-002 (RU 1대)
    return [
        {
            "management_number": "2024-001_DU측",
            "request_date": "2024-04-30",
            "du_team": "울산T",
            "du_owner": "김철수",
            "ru_team": "중부T",
            "ru_owner": "이영희",
            "category": "신설",
            "ru_id": "RU1001",
            "ru_name": "울산중구_B",
            "co_site_count": "2",
            "concentrator_name": "울산중앙국",
            "line_number": "4.37255E+11",
            "lte_mux": "MUX-01",
            "mux_type": "L2",
            "service_type": "5G",
            "region": "울산광역시",
            "sub_region": "중구",
            "neighborhood": "성남동",
            "lot": "123-4",
            "building": "중앙빌딩",
            "site_note": "옥상",
            "remark": "야간작업",
            "du_id": "DU77",
            "du_name": "울산DU",
            "channel_card": "CC1",
            "port": "P1",
        },
        {
            "management_number": "2024-001_RU측",
            "ru_team": "남부T",
            "ru_id": "RU1002",
            "ru_name": "울산중구_A",
            "channel_card": "CC2",
            "port": "P2",
            "service_type": "5G-SA",
        },
        {
            "management_number": "2024-002",
            "du_team": "-",
            "ru_team": "부산T",
            "ru_id": "RU2001",
            "ru_name": "부산진_C",
            "line_number": "010-1234",
        },
    ]


@pytest.fixture()
def sample_csv(make_csv, sample_rows) -> str:
    return make_csv(sample_rows)


class FakeCursor:
    """psycopg2 cursor stand-in recording every statement.

    INSERTs (psycopg2.sql.Composed) for management numbers in fail_on raise
    IntegrityError; plain statements listed in fail_statements raise
    OperationalError.
    """

    def __init__(self, fail_on: Iterable[str] = (), fail_statements: Iterable[str] = ()) -> None:
        self.statements: list[str] = []
        self.inserted: list[tuple] = []
        self.fail_on = set(fail_on)
        self.fail_statements = set(fail_statements)
        self._next_id = 1
        self._returning: tuple | None = None

    def execute(self, query, params=None) -> None:
        if not isinstance(query, str):
            self.statements.append("INSERT")
            mgmt = params[0]
            if mgmt in self.fail_on:
                raise psycopg2.IntegrityError(
                    f'duplicate key value violates unique constraint "work_orders_management_number_key" ({mgmt})'
                )
            self.inserted.append(params)
            self._returning = (self._next_id, FIXED_NOW, FIXED_NOW)
            self._next_id += 1
            return
        self.statements.append(query)
        if query in self.fail_statements:
            raise psycopg2.OperationalError("server closed the connection unexpectedly")

    def fetchone(self):
        row, self._returning = self._returning, None
        return row


@pytest.fixture()
def fake_cursor() -> Callable[..., FakeCursor]:
    return FakeCursor
