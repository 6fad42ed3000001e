from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pandas as pd

from ..ingest.decoder import decode_bytes
from ..ingest.normalize import normalize_row
from ..ingest.reader import FormatError, check_format, parse_rows, split_lines
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import ImportConfig
from ..models.error_record import FORMAT_ERROR, PROCESSING_ERROR, ErrorRecord
from ..models.processing_result import BatchState, FileStat, ImportResult, ProcessingResult
from .committer import commit_work_orders
from .grouper import group_rows
from .progress import BatchProgress
from .synthesizer import synthesize_all

"""Service orchestration for the work-order importer.

import_batch() drives one byte buffer through
decode → parse → normalize → group → synthesize → commit, strictly in that
order, and returns the ImportResult that the transport layer renders.
process_all() runs one batch per .csv file of the configured directory.
"""

__all__ = [
    "ProcessingError",
    "FORMAT_ERROR_TITLE",
    "DATABASE_ERROR_TITLE",
    "scan_csv_files",
    "import_batch",
    "process_all",
]

logger = logging.getLogger(__name__)

FORMAT_ERROR_TITLE = "지원하지 않는 CSV 포맷입니다"
PARSE_ERROR_TITLE = "CSV 파일 파싱 중 오류가 발생했습니다"
DATABASE_ERROR_TITLE = "데이터베이스 저장 중 오류가 발생했습니다"
READ_ERROR_TITLE = "CSV 파일 처리 중 오류가 발생했습니다"


class ProcessingError(Exception):
    """Fatal errors that prevent a run from starting."""


def scan_csv_files(directory: Path) -> list[Path]:
    """List .csv files of a directory (non-recursive, sorted by name).

    Raises:
        ProcessingError: If directory doesn't exist or can't be read
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")

    try:
        return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() == ".csv")
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def _reject(
    result: ImportResult, title: str, error: Exception, error_type: str, error_log: ErrorLogBuffer | None
) -> ImportResult:
    logger.error("file=%s rejected: %s", result.file_name, error)
    result.error = title
    result.details = str(error)
    if error_log is not None:
        error_log.append(
            ErrorRecord.create(
                file=result.file_name,
                management_number="",
                row=-1,
                error_type=error_type,
                message=str(error),
            )
        )
    result.advance(BatchState.REJECTED)
    return result


def import_batch(
    data: bytes,
    config: ImportConfig,
    *,
    file_name: str = "<upload>",
    cursor: Any = None,
    error_log: ErrorLogBuffer | None = None,
) -> ImportResult:
    """Import one uploaded file.

    Args:
        data: Raw bytes of the export
        config: Import configuration (encoding, columns, team default, ...)
        file_name: Name used in logs and error records
        cursor: psycopg2 cursor (None = mock mode, nothing persisted)
        error_log: Buffer receiving structured error records

    Returns:
        ImportResult; rejected batches carry no records, committed batches
        carry the created records plus every recoverable error in order.
    """
    result = ImportResult(file_name=file_name)
    columns = config.columns

    text = decode_bytes(data, config.encoding)
    result.advance(BatchState.DECODED)

    try:
        check_format(split_lines(text), columns.marker_columns)
        table = parse_rows(text)
    except FormatError as e:
        return _reject(result, FORMAT_ERROR_TITLE, e, FORMAT_ERROR, error_log)
    except pd.errors.ParserError as e:
        return _reject(result, PARSE_ERROR_TITLE, e, PROCESSING_ERROR, error_log)
    result.advance(BatchState.PARSED)
    logger.info("file=%s rows=%d", file_name, len(table.rows))

    rows = [
        normalize_row(raw, row_number, columns, config.null_sentinels)
        for row_number, raw in table.numbered()
    ]
    result.advance(BatchState.NORMALIZED)

    groups = group_rows(rows, columns)
    result.advance(BatchState.GROUPED)

    synthesis = synthesize_all(
        groups,
        created_by=config.created_by,
        default_team=config.default_team,
        columns=columns,
        source_file=file_name,
        error_log=error_log,
    )
    result.errors.extend(synthesis.errors)
    result.total_processed = len(synthesis.dtos)
    result.advance(BatchState.SYNTHESIZED)

    result.advance(BatchState.COMMITTING)
    commit = commit_work_orders(
        cursor,
        synthesis.dtos,
        table=config.table,
        error_log=error_log,
        file_name=file_name,
    )
    result.errors.extend(commit.errors)
    if commit.rolled_back:
        result.error = DATABASE_ERROR_TITLE
        result.details = commit.fatal_error
        result.advance(BatchState.ROLLED_BACK)
        return result

    result.created = list(commit.created)
    result.advance(BatchState.COMMITTED)
    logger.info(
        "file=%s groups=%d total_processed=%d created=%d errors=%d",
        file_name,
        len(groups),
        result.total_processed,
        len(result.created),
        len(result.errors),
    )
    return result


def _read_failure(file_path: Path, error: Exception, error_log: ErrorLogBuffer) -> ImportResult:
    result = ImportResult(file_name=file_path.name)
    return _reject(result, READ_ERROR_TITLE, error, PROCESSING_ERROR, error_log)


def process_all(config: ImportConfig, cursor: Any = None, error_log: ErrorLogBuffer | None = None) -> ProcessingResult:
    """Import every .csv file of the configured directory, one batch per file.

    Args:
        config: Import configuration
        cursor: psycopg2 cursor (None = mock mode)
        error_log: Error buffer; a fresh one is created and flushed when omitted

    Raises:
        ProcessingError: the source directory is missing or unreadable
    """
    start_time = datetime.now(UTC)
    own_log = error_log is None
    if error_log is None:
        error_log = ErrorLogBuffer(started_at=start_time)

    file_paths = scan_csv_files(Path(config.source_directory))

    results: list[ImportResult] = []
    file_stats: list[FileStat] = []
    with BatchProgress(len(file_paths)) as progress:
        for file_path in file_paths:
            progress.start_batch(file_path.name)
            file_start = datetime.now(UTC)
            try:
                data = file_path.read_bytes()
            except OSError as e:
                result = _read_failure(file_path, e, error_log)
            else:
                result = import_batch(
                    data, config, file_name=file_path.name, cursor=cursor, error_log=error_log
                )
            elapsed = (datetime.now(UTC) - file_start).total_seconds()
            results.append(result)
            file_stats.append(
                FileStat(
                    file_name=file_path.name,
                    state=result.state.value,
                    total_processed=result.total_processed,
                    created=len(result.created),
                    errors=len(result.errors),
                    elapsed_seconds=elapsed,
                )
            )
            progress.finish_batch(result)

    if own_log and len(error_log):
        counts = " ".join(f"{t}={n}" for t, n in error_log.count_by_type().items())
        logger.warning("errors by type: %s", counts)
        path = error_log.flush()
        logger.info("error log written: %s", path)

    end_time = datetime.now(UTC)
    committed = sum(1 for r in results if r.success)
    return ProcessingResult(
        committed_files=committed,
        failed_files=len(results) - committed,
        total_processed=sum(r.total_processed for r in results),
        total_created=sum(len(r.created) for r in results),
        total_errors=sum(len(r.errors) for r in results),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
        results=results,
    )
