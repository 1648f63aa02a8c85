"""Line-oriented terminal front end for the interactive upgrade flow."""

from __future__ import annotations

import logging
import re
import sys
from typing import Callable, TextIO

from domain.upgrades.models import RefreshState, UpgradeCandidate
from services.upgrade.batch import BatchOutcome
from ui.upgrade_list.controller import KeyOutcome, SelectionController
from ui.upgrade_list.rendering import format_candidate, render_rows
from viewmodels.selection_session import SelectionSession

logger = logging.getLogger(__name__)

_COMMAND_PATTERN = re.compile(r"^\s*(\S)\s*(?:(\d+)\s*(?:-\s*(\d+))?)?\s*$")


class TerminalPrompter:
    """Prompt on a text terminal; commands are typed one per line.

    ``s 5`` selects row 5, ``u 6-9`` unselects rows 6 to 9, ``S``/``U``
    select or unselect everything, ``x`` upgrades the selection and ``q``
    quits.  End of input counts as quitting.
    """

    def __init__(
        self,
        *,
        input_func: Callable[[str], str] = input,
        output: TextIO | None = None,
    ) -> None:
        self._input = input_func
        self._output = output if output is not None else sys.stdout
        self._open = False

    def confirm_refresh(self, state: RefreshState) -> bool:
        if state.last_refresh is None:
            question = "Package metadata has never been refreshed. Refresh now?"
        else:
            question = (
                f"Package metadata was last refreshed {state.last_refresh:%Y-%m-%d %H:%M}. "
                "Refresh now?"
            )
        return self._ask_yes_no(question)

    def confirm_upgrade(self, candidate: UpgradeCandidate) -> bool:
        return self._ask_yes_no(f"Upgrade {format_candidate(candidate)}?")

    def choose(self, session: SelectionSession) -> bool:
        controller = SelectionController(session)
        self._open = True
        while True:
            self._draw(session)
            line = self._read("> ")
            if line is None:
                return False
            match = _COMMAND_PATTERN.match(line)
            if match is None:
                self._write("Unrecognised command; try 's 5', 'u 6-9', 'S', 'U', 'x' or 'q'.")
                continue
            key, first, last = match.groups()
            row = int(first) if first else None
            end_row = int(last) if last else None
            result = controller.handle_key(key, row, end_row)
            if result.outcome is KeyOutcome.COMMIT:
                if session.is_empty():
                    self._write("Nothing selected.")
                return True
            if result.outcome is KeyOutcome.QUIT:
                return False
            if result.message:
                self._write(result.message)

    def close(self) -> None:
        if self._open:
            logger.debug("Closing upgrade selection view")
        self._open = False

    def notify(self, message: str) -> None:
        self._write(message)

    def report(self, outcome: BatchOutcome) -> None:
        if outcome.cancelled:
            self._write("Upgrade cancelled.")
            return
        if outcome.succeeded:
            self._write(f"Upgraded {len(outcome.succeeded)} package(s): {', '.join(outcome.succeeded)}")
        for error in outcome.failures:
            self._write(f"Failed to upgrade {error.name}: {error.kind.value} {error.reason}".rstrip())

    def _draw(self, session: SelectionSession) -> None:
        for row, line in enumerate(render_rows(session), start=1):
            self._write(f"{row:>3} {line}".rstrip())

    def _ask_yes_no(self, question: str) -> bool:
        while True:
            answer = self._read(f"{question} [y/n] ")
            if answer is None:
                return False
            normalized = answer.strip().lower()
            if normalized in {"y", "yes"}:
                return True
            if normalized in {"n", "no"}:
                return False
            self._write("Please answer 'y' or 'n'.")

    def _read(self, prompt: str) -> str | None:
        try:
            return self._input(prompt)
        except EOFError:
            return None

    def _write(self, message: str) -> None:
        print(message, file=self._output)


__all__ = ["TerminalPrompter"]
