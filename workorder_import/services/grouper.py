from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from ..models.config_models import ColumnNames
from ..models.group import Group
from ..models.row_data import NormalizedRow
from ..models.work_order import WorkType

"""Fold normalized rows into per-installation groups.

Rows are keyed by the base management number (side suffix removed). Row order
is preserved inside each group and groups keep first-seen order, which makes
the first-seen team tie-break deterministic.
"""

__all__ = [
    "get_base_management_number",
    "group_rows",
]

logger = logging.getLogger(__name__)

_SIDE_SUFFIX = re.compile(
    "(" + "|".join(re.escape(wt.suffix) for wt in WorkType) + ")$"
)


def get_base_management_number(management_number: str) -> str:
    """Strip a trailing `_DU측` / `_RU측` from a management number."""
    return _SIDE_SUFFIX.sub("", management_number)


def _record_team(group: Group, side: str, value: str | None) -> None:
    if value is None:
        return
    if side == "DU":
        if group.du_team is None:
            group.du_team = value
        seen = group.du_teams_seen
        recorded = group.du_team
    else:
        if group.ru_team is None:
            group.ru_team = value
        seen = group.ru_teams_seen
        recorded = group.ru_team
    seen.add(value)
    if len(seen) > 1:
        # 경고만 남기고 처음 값 유지
        logger.warning(
            "team conflict group=%s side=%s kept=%s seen=%s",
            group.base_key,
            side,
            recorded,
            sorted(seen),
        )
        if side not in group.conflicts:
            group.conflicts.append(side)


def group_rows(rows: Iterable[NormalizedRow], columns: ColumnNames) -> dict[str, Group]:
    """Group rows by base management number.

    Rows without a management number are dropped without an error. The first
    DU/RU team value seen for a group is kept; later distinct values only emit
    a conflict warning.
    """
    groups: dict[str, Group] = {}
    for row in rows:
        mgmt = row.get(columns.management_number)
        if not mgmt:
            logger.debug("row=%d has no management number, skipped", row.row_number)
            continue
        base_key = get_base_management_number(mgmt)
        if not base_key:
            logger.debug("row=%d management number %r has no base part, skipped", row.row_number, mgmt)
            continue
        group = groups.get(base_key)
        if group is None:
            group = Group(base_key=base_key)
            groups[base_key] = group
        group.rows.append(row)
        _record_team(group, "DU", row.get(columns.du_team))
        _record_team(group, "RU", row.get(columns.ru_team))
    logger.debug("grouped into %d installation(s)", len(groups))
    return groups
