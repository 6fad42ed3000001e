from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from workorder_import.logging.error_log import ErrorLogBuffer
from workorder_import.services.orchestrator import ProcessingError, process_all, scan_csv_files


def test_scan_csv_files_sorted_and_filtered(temp_workdir: Path):
    data = temp_workdir / "data"
    for name in ["b.csv", "a.CSV", "notes.txt", "c.xlsx"]:
        (data / name).write_text("x", encoding="utf-8")
    (data / "sub.csv").mkdir()
    assert [p.name for p in scan_csv_files(data)] == ["a.CSV", "b.csv"]


def test_scan_missing_directory(temp_workdir: Path):
    with pytest.raises(ProcessingError, match="Directory not found"):
        scan_csv_files(temp_workdir / "nope")


def test_process_all_mixed_files(import_config, temp_workdir: Path, make_csv, sample_csv, fake_cursor, caplog):
    data = temp_workdir / "data"
    (data / "01_good.csv").write_bytes(sample_csv.encode("euc-kr"))
    (data / "02_bad.csv").write_bytes(make_csv([{"management_number": "Q"}], roles=["management_number"]).encode("euc-kr"))

    with caplog.at_level(logging.INFO, logger="workorder_import"):
        result = process_all(import_config, cursor=fake_cursor())

    assert result.committed_files == 1
    assert result.failed_files == 1
    assert result.total_processed == 4
    assert result.total_created == 4
    assert result.total_errors == 0
    assert [(s.file_name, s.state) for s in result.file_stats] == [
        ("01_good.csv", "committed"),
        ("02_bad.csv", "rejected"),
    ]
    # 자체 버퍼는 종료 시 logs/ 로 flush
    (log_file,) = (temp_workdir / "logs").glob("errors-*.log")
    records = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert [(r["file"], r["error_type"]) for r in records] == [("02_bad.csv", "FORMAT_ERROR")]
    # 파일명 스탬프 = 실행 시작 시각
    assert log_file.name == f"errors-{result.start_time.strftime('%Y%m%d-%H%M%S')}.log"
    assert "errors by type: FORMAT_ERROR=1" in caplog.text


def test_process_all_uses_given_buffer_without_flushing(import_config, temp_workdir: Path):
    (temp_workdir / "data" / "bad.csv").write_bytes(b"only one line\n")
    buf = ErrorLogBuffer(temp_workdir / "elsewhere")
    result = process_all(import_config, error_log=buf)
    assert result.failed_files == 1
    assert len(buf) == 1
    assert not (temp_workdir / "elsewhere").exists()


def test_process_all_empty_directory(import_config):
    result = process_all(import_config)
    assert result.committed_files == result.failed_files == 0
    assert result.file_stats == []
    assert result.elapsed_seconds >= 0
