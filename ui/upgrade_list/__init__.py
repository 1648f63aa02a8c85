"""Terminal list view for choosing which packages to upgrade."""

from ui.upgrade_list.controller import KEYMAP, KeyOutcome, KeyResult, SelectionCommand, SelectionController
from ui.upgrade_list.rendering import format_candidate, render_rows, row_to_index
from ui.upgrade_list.terminal import TerminalPrompter

__all__ = [
    "KEYMAP",
    "KeyOutcome",
    "KeyResult",
    "SelectionCommand",
    "SelectionController",
    "TerminalPrompter",
    "format_candidate",
    "render_rows",
    "row_to_index",
]
