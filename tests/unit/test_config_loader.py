from __future__ import annotations

from dataclasses import fields
from pathlib import Path

import pytest

from workorder_import.config.loader import ConfigError, config_from_dict, load_config
from workorder_import.models.config_models import DEFAULT_NULL_SENTINELS, ImportConfig


def test_load_config_ok(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.source_directory == "./data"
    assert cfg.created_by == 7
    assert cfg.encoding == "cp949"
    assert cfg.default_team == "기타"
    assert cfg.null_sentinels == frozenset({"undefined", "-"})
    assert cfg.database.port == 5432
    assert cfg.columns.ru_id == "RU_ID"


def test_defaults_applied():
    cfg = config_from_dict({"source_directory": "./data", "created_by": 1})
    assert cfg.encoding == "cp949"
    assert cfg.default_team == "기타"
    assert cfg.table == "work_orders"
    assert cfg.null_sentinels == DEFAULT_NULL_SENTINELS
    assert cfg.database.host is None


def test_column_override():
    cfg = config_from_dict({"source_directory": "d", "created_by": 1, "columns": {"line_number": "회선 번호"}})
    assert cfg.columns.line_number == "회선 번호"
    assert cfg.columns.management_number == "관리번호"


def test_unknown_column_role_rejected():
    with pytest.raises(ConfigError, match="unknown column roles"):
        config_from_dict({"source_directory": "d", "created_by": 1, "columns": {"nope": "x"}})


def test_empty_null_sentinels_allowed():
    cfg = config_from_dict({"source_directory": "d", "created_by": 1, "null_sentinels": []})
    assert cfg.null_sentinels == frozenset()


def test_missing_file(tmp_path: Path):
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(tmp_path / "missing.yml")


def test_invalid_yaml(tmp_path: Path):
    p = tmp_path / "bad.yml"
    p.write_text("source_directory: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(p)


def test_root_must_be_mapping(tmp_path: Path):
    p = tmp_path / "list.yml"
    p.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(p)


def test_encoding_override():
    cfg = config_from_dict({"source_directory": "d", "created_by": 1, "encoding": "utf-8"})
    assert cfg.encoding == "utf-8"


def test_timezone_key_not_accepted():
    # 타임스탬프는 항상 UTC; 효과 없는 설정 키는 스키마에서 거부
    with pytest.raises(ConfigError, match="config validation failed"):
        config_from_dict({"source_directory": "d", "created_by": 1, "timezone": "Asia/Seoul"})
    assert "timezone" not in {f.name for f in fields(ImportConfig)}


def test_sample_config_loads():
    repo_root = Path(__file__).resolve().parents[2]
    cfg = load_config(repo_root / "config" / "import.yml")
    assert cfg.encoding == "cp949"
