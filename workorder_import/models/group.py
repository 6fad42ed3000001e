from __future__ import annotations

from dataclasses import dataclass, field

from .row_data import NormalizedRow

__all__ = [
    "Group",
]


@dataclass
class Group:
    """All rows sharing one base management number.

    du_team / ru_team keep the first value seen for each side. The *_seen sets
    only feed conflict detection; conflicts lists the side labels ("DU", "RU")
    for which a second distinct value showed up.
    """
    base_key: str
    rows: list[NormalizedRow] = field(default_factory=list)
    du_team: str | None = None
    ru_team: str | None = None
    du_teams_seen: set[str] = field(default_factory=set)
    ru_teams_seen: set[str] = field(default_factory=set)
    conflicts: list[str] = field(default_factory=list)

    @property
    def first_row(self) -> NormalizedRow:
        return self.rows[0]
