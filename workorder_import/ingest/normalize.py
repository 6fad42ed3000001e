from __future__ import annotations

import math
import re
from collections.abc import Collection

from ..models.config_models import DEFAULT_NULL_SENTINELS, ColumnNames
from ..models.row_data import NormalizedRow, RawRow

"""Per-field normalization rules.

Every cell passes through trim_value, the single place where dynamic input
becomes "text or None". Team columns additionally lose all internal whitespace
and zero-width characters; the circuit / line number column is reduced to a
pure digit string after repairing spreadsheet exponent notation.
"""

__all__ = [
    "trim_value",
    "normalize_team",
    "normalize_circuit",
    "sci_to_plain",
    "normalize_row",
]

_SCI_PATTERN = re.compile(r"^[+-]?\d+(\.\d+)?e[+-]?\d+$", re.IGNORECASE | re.ASCII)
_NON_DIGIT = re.compile(r"[^0-9]")
_TEAM_NOISE = re.compile(r"[\s\u200b\u200c\u200d\ufeff]+")


def trim_value(value: object, null_sentinels: Collection[str] = DEFAULT_NULL_SENTINELS) -> str | None:
    """Return the trimmed text of a cell, or None when the cell is absent.

    None / NaN, empty text and the placeholder tokens in null_sentinels
    ("undefined", "-") are absent. "0" is a present value.
    """
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    text = str(value).strip()
    if text == "" or text in null_sentinels:
        return None
    return text


def normalize_team(value: object, null_sentinels: Collection[str] = DEFAULT_NULL_SENTINELS) -> str | None:
    """Canonical team name: trimmed, no whitespace or zero-width characters."""
    text = trim_value(value, null_sentinels)
    if text is None:
        return None
    text = _TEAM_NOISE.sub("", text)
    return text or None


def sci_to_plain(text: str) -> str:
    """Render exponent notation ("4.37255E+11") as a plain decimal string.

    Goes through a float, so magnitudes above 2**53 can lose low-order digits.
    Downstream data already carries that output, keep it as is.
    """
    num = float(text)
    if not math.isfinite(num):
        return text
    if num.is_integer():
        return str(int(num))
    return f"{num:.20f}".rstrip("0").rstrip(".")


def normalize_circuit(value: object, null_sentinels: Collection[str] = DEFAULT_NULL_SENTINELS) -> str | None:
    """Circuit / line number as digits only; None when nothing is left."""
    text = trim_value(value, null_sentinels)
    if text is None:
        return None
    if _SCI_PATTERN.match(text):
        text = sci_to_plain(text)
    digits = _NON_DIGIT.sub("", text)
    return digits or None


def normalize_row(
    raw: RawRow,
    row_number: int,
    columns: ColumnNames,
    null_sentinels: Collection[str] = DEFAULT_NULL_SENTINELS,
) -> NormalizedRow:
    values: dict[str, str | None] = {}
    team_columns = columns.team_columns
    for col, val in raw.items():
        if col in team_columns:
            values[col] = normalize_team(val, null_sentinels)
        elif col == columns.line_number:
            values[col] = normalize_circuit(val, null_sentinels)
        else:
            values[col] = trim_value(val, null_sentinels)
    return NormalizedRow(row_number=row_number, values=values)
