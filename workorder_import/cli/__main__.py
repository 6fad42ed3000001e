from __future__ import annotations

import argparse
import json
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import pandas as pd
import psycopg2
from dotenv import load_dotenv

from ..config.loader import ConfigError, load_config
from ..ingest.decoder import decode_bytes
from ..ingest.normalize import normalize_row
from ..ingest.reader import FormatError, check_format, parse_rows, split_lines
from ..logging.init import log_summary, set_debug, setup_logging
from ..models.config_models import ImportConfig
from ..services.grouper import group_rows
from ..services.orchestrator import ProcessingError, process_all, scan_csv_files
from ..services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env (python-dotenv) and config/import.yml
- Scan the source directory for .csv exports (non-recursive)
- Import each file as one batch / one transaction
- Print the SUMMARY line and exit with the batch outcome code
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

DEFAULT_CONFIG_PATH = Path("config/import.yml")


def _resolve_dsn(cfg: ImportConfig) -> str:
    """Connection string; environment first, config `database` block as fallback.

    1. DATABASE_URL / PGDSN (whole DSN)
    2. PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE per field
    3. config/import.yml `database`
    """
    db_cfg = cfg.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def _db_connection(cfg: ImportConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper)
    """Yield a cursor on an autocommit connection.

    The committer drives transactions with explicit BEGIN / COMMIT / ROLLBACK,
    so the driver must not open its own.
    """
    conn = psycopg2.connect(_resolve_dsn(cfg))
    try:
        conn.autocommit = True
        with conn.cursor() as cur:
            yield cur
    finally:
        conn.close()


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="CSV -> PostgreSQL DU/RU work-order importer")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to import.yml")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print headers, first rows and groups then exit")
    p.add_argument("--json", action="store_true", help="Print each batch response as JSON")
    return p.parse_args(argv)


def _inspect_data(cfg: ImportConfig) -> int:
    try:
        files = scan_csv_files(Path(cfg.source_directory))
    except ProcessingError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    if not files:
        print("inspect: no .csv files")
        return EXIT_SUCCESS_ALL
    for f in files:
        print(f"FILE: {f.name}")
        text = decode_bytes(f.read_bytes(), cfg.encoding)
        try:
            check_format(split_lines(text), cfg.columns.marker_columns)
            table = parse_rows(text)
        except (FormatError, pd.errors.ParserError) as e:
            print(f"  format_error: {e}")
            continue
        rows = [normalize_row(raw, n, cfg.columns, cfg.null_sentinels) for n, raw in table.numbered()]
        groups = group_rows(rows, cfg.columns)
        print(f"  cols={table.columns}")
        print(f"  rows={len(rows)} groups={len(groups)}")
        for row in rows[:3]:
            print(f"    row {row.row_number}: {row.values}")
    return EXIT_SUCCESS_ALL


def _run(cfg: ImportConfig, cursor: Any, as_json: bool) -> int:
    result = process_all(cfg, cursor=cursor)
    if as_json:
        for batch in result.results or []:
            print(json.dumps({"file": batch.file_name, **batch.to_response()}, ensure_ascii=False, default=str))
    log_summary(render_summary_line(result).removeprefix("SUMMARY "))
    if result.failed_files > 0 or result.total_errors > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None 일 때만 sys.argv 사용 (빈 리스트는 인자 없음)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    # .env 값이 기존 환경 변수보다 우선
    load_dotenv(dotenv_path=Path(".env"), override=True)

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.debug:
        set_debug()

    directory = Path(cfg.source_directory)
    if not directory.exists():
        logger.error(f"directory not found: {directory}")
        return EXIT_FATAL
    logger.info(f"Processing files from: {directory}")

    if args.inspect_data:
        return _inspect_data(cfg)

    try:
        if os.getenv("DISABLE_DB_CONNECT") == "1":
            logger.info("DB connect disabled via DISABLE_DB_CONNECT=1 -> mock mode, nothing is persisted")
            return _run(cfg, None, args.json)
        try:
            with _db_connection(cfg) as cur:
                return _run(cfg, cur, args.json)
        except psycopg2.OperationalError as e:
            logger.error(f"database connection failed: {e}")
            return EXIT_FATAL
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
