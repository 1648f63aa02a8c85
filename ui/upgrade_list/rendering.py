"""Render a selection session using the upgrade list line protocol.

Rows are numbered from 1.  Rows 1-4 hold the header and key help and are
never selectable; candidate ``index`` is drawn on row ``index + 5``.  Each
data row starts with a one character marker: ``S`` when selected, a space
otherwise.
"""

from __future__ import annotations

from domain.upgrades.models import UpgradeCandidate
from viewmodels.selection_session import SelectionSession

HEADER_ROWS = 4
FIRST_DATA_ROW = HEADER_ROWS + 1
SELECTED_MARKER = "S"
UNSELECTED_MARKER = " "

KEY_HELP = (
    "s: select  u: unselect  S: select all  U: unselect all",
    "x: upgrade selected  q: quit",
)


def format_candidate(candidate: UpgradeCandidate) -> str:
    installed = candidate.installed
    if candidate.available is None:
        return f"{installed.name} ({installed.display_version}) (vc)"
    return f"{installed.name} ({installed.display_version}) => ({candidate.available.version})"


def header_lines(session: SelectionSession) -> list[str]:
    count = len(session)
    selected = len(session.selected_indices())
    return [
        f"Upgradeable packages: {count} ({selected} selected)",
        *KEY_HELP,
        "",
    ]


def render_rows(session: SelectionSession) -> list[str]:
    """Return every row of the list view, header first."""

    rows = header_lines(session)
    for index, candidate in enumerate(session.candidates):
        marker = SELECTED_MARKER if session.is_selected(index) else UNSELECTED_MARKER
        rows.append(f"{marker} {format_candidate(candidate)}")
    return rows


def row_to_index(row: int, count: int) -> int | None:
    """Map a 1-based row number to a candidate index, ``None`` if not a data row."""

    index = row - FIRST_DATA_ROW
    if 0 <= index < count:
        return index
    return None


def index_to_row(index: int) -> int:
    return index + FIRST_DATA_ROW


__all__ = [
    "FIRST_DATA_ROW",
    "HEADER_ROWS",
    "SELECTED_MARKER",
    "UNSELECTED_MARKER",
    "format_candidate",
    "header_lines",
    "index_to_row",
    "render_rows",
    "row_to_index",
]
