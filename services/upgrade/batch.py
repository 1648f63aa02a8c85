"""Run upgrades for a batch of selected candidates."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Callable

from domain.upgrades.errors import IndexOutOfRangeError, UpgradeError, UpgradeErrorKind
from domain.upgrades.models import UpgradeCandidate
from services.upgrade.executor import UpgradeExecutor
from shared.result import Result


_LOGGER = logging.getLogger(__name__)


@dataclass
class BatchOutcome:
    """Per-index results of one batch run."""

    candidates: tuple[UpgradeCandidate, ...] = ()
    results: dict[int, Result[str, UpgradeError]] = field(default_factory=dict)
    cancelled: bool = False

    @property
    def attempted(self) -> list[int]:
        return sorted(self.results)

    @property
    def succeeded(self) -> list[str]:
        return [self.candidates[index].name for index in self.attempted if self.results[index].is_ok()]

    @property
    def failures(self) -> list[UpgradeError]:
        return [
            self.results[index].error  # type: ignore[misc]
            for index in self.attempted
            if self.results[index].is_err()
        ]

    @property
    def failed(self) -> list[str]:
        return [error.name for error in self.failures]

    @property
    def is_success(self) -> bool:
        return not self.failures


class BatchRunner:
    """Upgrade selected candidates one at a time, isolating failures."""

    def __init__(self, executor: UpgradeExecutor) -> None:
        self._executor = executor

    def run_all(
        self,
        candidates: Sequence[UpgradeCandidate],
        indices: Iterable[int],
        *,
        on_complete: Callable[[], None] | None = None,
    ) -> BatchOutcome:
        outcome = BatchOutcome(candidates=tuple(candidates))
        try:
            ordered = sorted(set(indices))
            invalid = [index for index in ordered if not 0 <= index < len(outcome.candidates)]
            if invalid:
                raise IndexOutOfRangeError(
                    f"Selection indices {invalid} outside 0..{len(outcome.candidates) - 1}"
                )
            if not ordered:
                _LOGGER.info("No packages selected for upgrade")
            for index in ordered:
                candidate = outcome.candidates[index]
                outcome.results[index] = self._run_one(candidate)
        finally:
            if on_complete:
                on_complete()

        if outcome.failures:
            _LOGGER.warning(
                "Upgrade batch finished with %d failure(s): %s",
                len(outcome.failures),
                ", ".join(outcome.failed),
            )
        else:
            _LOGGER.info("Upgrade batch finished: %d package(s) upgraded", len(outcome.succeeded))
        return outcome

    def _run_one(self, candidate: UpgradeCandidate) -> Result[str, UpgradeError]:
        try:
            return self._executor.upgrade(candidate)
        except Exception as exc:  # pragma: no cover - defensive guard
            _LOGGER.exception("Unexpected error while upgrading %s", candidate.name)
            kind = (
                UpgradeErrorKind.VC_SYNC_FAILED
                if candidate.is_vc_tracked
                else UpgradeErrorKind.INSTALL_FAILED
            )
            return Result.err(UpgradeError(kind, candidate.name, str(exc)))


__all__ = ["BatchOutcome", "BatchRunner"]
