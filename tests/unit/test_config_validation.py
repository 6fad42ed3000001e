from __future__ import annotations

import pytest

from workorder_import.config.loader import ConfigError, config_from_dict


@pytest.mark.parametrize(
    "data",
    [
        {"created_by": 1},
        {"source_directory": "./data"},
        {"source_directory": "./data", "created_by": "admin"},
        {"source_directory": "./data", "created_by": 0},
        {"source_directory": "", "created_by": 1},
        {"source_directory": "./data", "created_by": 1, "table": "work orders; drop"},
        {"source_directory": "./data", "created_by": 1, "unexpected": True},
        {"source_directory": "./data", "created_by": 1, "database": {"port": "5432"}},
        {"source_directory": "./data", "created_by": 1, "null_sentinels": ["-", "-"]},
    ],
)
def test_schema_rejects(data):
    with pytest.raises(ConfigError, match="config validation failed"):
        config_from_dict(data)


def test_schema_accepts_null_database_fields():
    cfg = config_from_dict(
        {"source_directory": "./data", "created_by": 1, "database": {"host": None, "password": None}}
    )
    assert cfg.database.password is None
