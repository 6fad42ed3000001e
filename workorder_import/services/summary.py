from __future__ import annotations

from ..models.processing_result import ProcessingResult

"""SUMMARY line rendering for one import run."""


def _format_seconds(seconds: float) -> str:
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # 지수 표기 방지
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: ProcessingResult) -> str:
    """Render the SUMMARY line of a run.

    Format:
    SUMMARY files={n} committed={c} failed={f} total_processed={p}
    created={k} errors={e} elapsed_sec={s}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     committed_files=1, failed_files=0, total_processed=4, total_created=4,
        ...     total_errors=0, start_time=start, end_time=end, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY files=1 committed=1 failed=0 total_processed=4 created=4 errors=0 elapsed_sec=2'
    """
    total_files = result.committed_files + result.failed_files
    return (
        f"SUMMARY files={total_files} "
        f"committed={result.committed_files} "
        f"failed={result.failed_files} "
        f"total_processed={result.total_processed} "
        f"created={result.total_created} "
        f"errors={result.total_errors} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
