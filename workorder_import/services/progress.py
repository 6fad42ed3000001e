from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

from ..models.processing_result import ImportResult

"""Run progress with tqdm (TTY only).

One bar over the batch files of a run; the postfix carries running totals of
created work orders, recoverable errors and failed batches. Without a TTY (CI,
cron, piped output) no bar is created and only the totals are kept.
"""

__all__ = [
    "BatchProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """True if stdout is a TTY and progress should be displayed."""
    return sys.stdout.isatty()


class BatchProgress:
    def __init__(self, total_files: int, *, description: str = "Importing files") -> None:
        self.total_files = total_files
        self.description = description
        self.files_done = 0
        self.created = 0
        self.errors = 0
        self.failed = 0
        self.pbar: TqdmType[Any] | None = None
        if is_tty_enabled():
            self.pbar = tqdm(
                total=total_files,
                desc=description,
                unit="file",
                leave=True,
                ncols=80,
                ascii=True,
            )

    @property
    def enabled(self) -> bool:
        return self.pbar is not None

    def start_batch(self, file_name: str) -> None:
        if self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({file_name})")

    def finish_batch(self, result: ImportResult) -> None:
        """Fold one finished batch into the running totals and advance the bar."""
        self.files_done += 1
        self.created += len(result.created)
        self.errors += len(result.errors)
        if not result.success:
            self.failed += 1
        if self.pbar is not None:
            self.pbar.set_postfix(created=self.created, errors=self.errors, failed=self.failed)
            self.pbar.update(1)
            self.pbar.set_description(self.description)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> BatchProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
