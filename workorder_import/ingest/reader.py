from __future__ import annotations

import io
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

import pandas as pd

from ..models.row_data import RawRow

"""Delimited text -> raw rows.

The first non-blank line is the header; every later record is a data row
zipped against it. Records are counted by pandas, not by physical lines, so a
quoted cell spanning lines does not shift the row numbers after it. Before any
row is read the header must carry both marker columns (management number and
RU id), otherwise the whole file is rejected with FormatError.

pandas does the CSV work: quoted cells may contain the delimiter, every cell is
kept as text (no NA or number inference, so "0" and "010" survive as typed).
"""

__all__ = [
    "FormatError",
    "ParsedTable",
    "split_lines",
    "read_header",
    "check_format",
    "parse_rows",
]

BOM = "\ufeff"


class FormatError(Exception):
    """Raised when the file does not satisfy the header contract."""


@dataclass
class ParsedTable:
    columns: list[str]
    rows: list[RawRow]  # 헤더 라벨 -> 셀 문자열
    row_numbers: list[int]  # 1-based record position (header = 1)

    def numbered(self) -> Iterator[tuple[int, RawRow]]:
        return zip(self.row_numbers, self.rows, strict=True)


def split_lines(text: str) -> list[str]:
    """Split into lines and drop the blank ones (a leading BOM is discarded)."""
    if text.startswith(BOM):
        text = text[len(BOM):]
    return [line for line in text.splitlines() if line.strip()]


def _read_csv(text: str, **kwargs) -> pd.DataFrame:
    return pd.read_csv(
        io.StringIO(text),
        dtype=str,
        keep_default_na=False,
        na_filter=False,
        skip_blank_lines=True,
        index_col=False,
        engine="python",
        on_bad_lines="warn",
        **kwargs,
    )


def read_header(header_line: str) -> list[str]:
    df = _read_csv(header_line, nrows=0)
    return [str(c).strip() for c in df.columns]


def check_format(lines: list[str], marker_columns: Iterable[str]) -> list[str]:
    """Validate the header contract and return the header labels.

    Raises FormatError when fewer than two non-blank lines exist or when any
    marker column is missing from the header.
    """
    if len(lines) < 2:
        raise FormatError(f"expected a header and at least one data row, got {len(lines)} line(s)")
    columns = read_header(lines[0])
    missing = [m for m in marker_columns if m not in columns]
    if missing:
        raise FormatError(f"header missing marker columns: {missing}")
    return columns


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return bool(pd.isna(value))


def parse_rows(text: str) -> ParsedTable:
    """Parse the decoded text into ordered raw rows.

    The text goes to pandas whole, so a quoted cell may span lines (blank ones
    included) and keeps them verbatim; blank lines between records are skipped
    by the reader. Rows whose every cell is blank are skipped (e.g. a line of
    bare delimiters). Rows with more cells than the header are dropped by
    pandas with a ParserWarning.
    """
    df = _read_csv(text.removeprefix(BOM))
    df.columns = [str(c).strip() for c in df.columns]
    if df.empty:
        return ParsedTable(columns=list(df.columns), rows=[], row_numbers=[])
    blank = df.apply(lambda s: s.map(_is_blank))
    df = df[~blank.all(axis=1)]
    rows: list[RawRow] = df.to_dict(orient="records")
    # DataFrame index = 0-based record position; +2 skips the header record
    row_numbers = [int(i) + 2 for i in df.index]
    return ParsedTable(columns=list(df.columns), rows=rows, row_numbers=row_numbers)
