from __future__ import annotations

import json
import re
from pathlib import Path

from workorder_import.logging.error_log import ErrorLogBuffer
from workorder_import.services.orchestrator import import_batch

KEYS = {"timestamp", "file", "management_number", "row", "error_type", "message"}
ERROR_TYPES = {"FORMAT_ERROR", "SYNTHESIS_ERROR", "RECORD_CREATE_ERROR", "TRANSACTION_ERROR", "PROCESSING_ERROR"}
UPPER_SNAKE = re.compile(r"^[A-Z][A-Z0-9_]*$")


def _flushed_records(buf: ErrorLogBuffer) -> list[dict]:
    path = buf.flush()
    assert path is not None
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_error_log_lines_have_fixed_schema(import_config, sample_csv, make_csv, fake_cursor, tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path)
    import_batch(b"\n", import_config, file_name="empty.csv", error_log=buf)
    import_batch(
        sample_csv.encode("euc-kr"),
        import_config,
        file_name="orders.csv",
        cursor=fake_cursor(fail_on={"2024-001_DU측"}),
        error_log=buf,
    )
    import_batch(
        sample_csv.encode("euc-kr"),
        import_config,
        file_name="dead.csv",
        cursor=fake_cursor(fail_statements={"BEGIN"}),
        error_log=buf,
    )
    records = _flushed_records(buf)

    assert [r["error_type"] for r in records] == ["FORMAT_ERROR", "RECORD_CREATE_ERROR", "TRANSACTION_ERROR"]
    for rec in records:
        assert set(rec) == KEYS
        assert rec["error_type"] in ERROR_TYPES
        assert UPPER_SNAKE.match(rec["error_type"])
        assert isinstance(rec["row"], int)
        assert rec["timestamp"].endswith("Z")


def test_unknown_row_uses_minus_one(import_config, tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path)
    import_batch("관리번호,RU명\nA,B\n".encode("euc-kr"), import_config, file_name="x.csv", error_log=buf)
    (rec,) = _flushed_records(buf)
    assert rec["row"] == -1
    assert rec["management_number"] == ""
    assert rec["file"] == "x.csv"
