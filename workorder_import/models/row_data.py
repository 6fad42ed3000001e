from __future__ import annotations

from dataclasses import dataclass

"""Row models for the work-order CSV importer.

RawRow is what the parser hands over: header label -> cell text.
NormalizedRow is the same mapping after the field normalizer ran, with absent
cells carried as None (the string "0" stays a present value).
"""

__all__ = [
    "RawRow",
    "NormalizedRow",
]

RawRow = dict[str, object]


@dataclass(frozen=True)
class NormalizedRow:
    """A single input row after trimming and canonicalization.

    row_number is the record position in the file, header = 1, so the first
    data row is 2. A quoted cell spanning lines still counts as one record.
    """
    row_number: int
    values: dict[str, str | None]

    def get(self, column: str) -> str | None:
        return self.values.get(column)
