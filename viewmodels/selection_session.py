"""View-model tracking which upgrade candidates are marked for execution."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from domain.upgrades.errors import IndexOutOfRangeError
from domain.upgrades.models import UpgradeCandidate


class SelectionSession:
    """Multi-select state over a fixed snapshot of upgrade candidates.

    Every candidate starts selected.  Indices are stable for the lifetime of
    the session; only their selected flag changes.
    """

    def __init__(self, candidates: Iterable[UpgradeCandidate]) -> None:
        self._candidates: tuple[UpgradeCandidate, ...] = tuple(candidates)
        self._selected: list[bool] = [True] * len(self._candidates)

    @property
    def candidates(self) -> tuple[UpgradeCandidate, ...]:
        return self._candidates

    def __len__(self) -> int:
        return len(self._candidates)

    def is_selected(self, index: int) -> bool:
        self._check_index(index)
        return self._selected[index]

    def select(self, index: int) -> None:
        self._check_index(index)
        self._selected[index] = True

    def unselect(self, index: int) -> None:
        self._check_index(index)
        self._selected[index] = False

    def select_all(self) -> None:
        self._selected = [True] * len(self._candidates)

    def unselect_all(self) -> None:
        self._selected = [False] * len(self._candidates)

    def select_range(self, start: int, stop: int) -> None:
        """Select ``start`` through ``stop`` inclusive."""

        for index in self._checked_range(start, stop):
            self._selected[index] = True

    def unselect_range(self, start: int, stop: int) -> None:
        """Unselect ``start`` through ``stop`` inclusive."""

        for index in self._checked_range(start, stop):
            self._selected[index] = False

    def selected_indices(self) -> list[int]:
        """Return selected indices in ascending (display) order."""

        return [index for index, selected in enumerate(self._selected) if selected]

    def selected_candidates(self) -> list[UpgradeCandidate]:
        return [self._candidates[index] for index in self.selected_indices()]

    def is_empty(self) -> bool:
        return not any(self._selected)

    def _checked_range(self, start: int, stop: int) -> Sequence[int]:
        low, high = (start, stop) if start <= stop else (stop, start)
        self._check_index(low)
        self._check_index(high)
        return range(low, high + 1)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._candidates):
            raise IndexOutOfRangeError(
                f"Selection index {index} outside 0..{len(self._candidates) - 1}"
            )


__all__ = ["SelectionSession"]
