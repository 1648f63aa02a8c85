"""Protocol for the interactive surface driven by the upgrade flows."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from domain.upgrades.models import RefreshState, UpgradeCandidate
from viewmodels.selection_session import SelectionSession

if TYPE_CHECKING:
    from services.upgrade.batch import BatchOutcome


class UpgradePrompter(Protocol):
    """User interaction needed by :class:`services.upgrade.service.UpgradeService`."""

    def confirm_refresh(self, state: RefreshState) -> bool:
        """Ask whether stale package metadata should be refreshed."""

    def confirm_upgrade(self, candidate: UpgradeCandidate) -> bool:
        """Ask whether the only available candidate should be upgraded."""

    def choose(self, session: SelectionSession) -> bool:
        """Let the user edit ``session``; ``True`` commits, ``False`` quits."""

    def close(self) -> None:
        """Tear down the selection view once the batch has finished."""

    def notify(self, message: str) -> None:
        """Show an informational message."""

    def report(self, outcome: "BatchOutcome") -> None:
        """Summarise the result of a batch."""


__all__ = ["UpgradePrompter"]
