"""Translate list-view key presses into selection session operations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from ui.upgrade_list.rendering import row_to_index
from viewmodels.selection_session import SelectionSession

logger = logging.getLogger(__name__)


class SelectionCommand(str, Enum):
    SELECT = "select"
    UNSELECT = "unselect"
    SELECT_ALL = "select_all"
    UNSELECT_ALL = "unselect_all"
    COMMIT = "commit"
    QUIT = "quit"


KEYMAP: dict[str, SelectionCommand] = {
    "s": SelectionCommand.SELECT,
    "u": SelectionCommand.UNSELECT,
    "S": SelectionCommand.SELECT_ALL,
    "U": SelectionCommand.UNSELECT_ALL,
    "x": SelectionCommand.COMMIT,
    "q": SelectionCommand.QUIT,
}


class KeyOutcome(str, Enum):
    CONTINUE = "continue"
    COMMIT = "commit"
    QUIT = "quit"
    IGNORED = "ignored"


@dataclass(frozen=True)
class KeyResult:
    outcome: KeyOutcome
    message: str | None = None


class SelectionController:
    """Apply key presses to one :class:`SelectionSession`.

    Row arguments use list-view row numbers; header rows and rows past the
    last candidate are ignored rather than treated as errors.
    """

    def __init__(self, session: SelectionSession) -> None:
        self._session = session

    @property
    def session(self) -> SelectionSession:
        return self._session

    def handle_key(self, key: str, row: int | None = None, end_row: int | None = None) -> KeyResult:
        command = KEYMAP.get(key)
        if command is None:
            return KeyResult(KeyOutcome.IGNORED, f"Unknown key: {key!r}")

        if command is SelectionCommand.COMMIT:
            return KeyResult(KeyOutcome.COMMIT)
        if command is SelectionCommand.QUIT:
            return KeyResult(KeyOutcome.QUIT)
        if command is SelectionCommand.SELECT_ALL:
            self._session.select_all()
            return KeyResult(KeyOutcome.CONTINUE)
        if command is SelectionCommand.UNSELECT_ALL:
            self._session.unselect_all()
            return KeyResult(KeyOutcome.CONTINUE)

        if row is None:
            return KeyResult(KeyOutcome.IGNORED, f"'{key}' needs a row number")
        count = len(self._session)
        start = row_to_index(row, count)
        stop = row_to_index(end_row, count) if end_row is not None else start
        if start is None or stop is None:
            logger.debug("Ignoring key %s on non-selectable row %s-%s", key, row, end_row)
            return KeyResult(KeyOutcome.IGNORED, "Not a package row")

        if command is SelectionCommand.SELECT:
            self._session.select_range(start, stop)
        else:
            self._session.unselect_range(start, stop)
        return KeyResult(KeyOutcome.CONTINUE)


__all__ = ["KEYMAP", "KeyOutcome", "KeyResult", "SelectionCommand", "SelectionController"]
