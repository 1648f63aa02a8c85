"""Service coordinating metadata refreshes, candidate discovery and upgrades."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Callable

from domain.upgrades.errors import PackageStoreError, UnsupportedModeError
from domain.upgrades.models import RefreshState, UpgradeCandidate
from domain.upgrades.resolver import exclude_candidates, resolve_candidates
from domain.upgrades.staleness import is_stale
from services.upgrade.batch import BatchOutcome, BatchRunner
from services.upgrade.executor import UpgradeExecutor
from services.upgrade.prompts import UpgradePrompter
from services.upgrade.store import PackageStore
from viewmodels.selection_session import SelectionSession


_LOGGER = logging.getLogger(__name__)

UP_TO_DATE_MESSAGE = "All packages are up to date."


class UpgradeService:
    """Run the check, refresh and upgrade flows against a package store."""

    def __init__(
        self,
        store: PackageStore,
        *,
        interval_days: int = 7,
        strict_refresh: bool = True,
        excluded: Iterable[str] = (),
        runner: BatchRunner | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._store = store
        self._interval_days = interval_days
        self._strict_refresh = strict_refresh
        self._excluded = tuple(excluded)
        self._runner = runner or BatchRunner(UpgradeExecutor(store))
        self._clock = clock

    @property
    def store(self) -> PackageStore:
        return self._store

    @property
    def excluded(self) -> tuple[str, ...]:
        return self._excluded

    def check_mode(self, include_vc: bool) -> None:
        """Fail fast when VC-tracked upgrades cannot be honoured."""

        if include_vc and not self._store.supports_vc():
            raise UnsupportedModeError("VC-tracked upgrades requested but VC support is unavailable")

    def refresh_state(self) -> RefreshState:
        return RefreshState(last_refresh=self._store.last_refresh(), interval_days=self._interval_days)

    def needs_refresh(self, *, strict: bool | None = None) -> bool:
        strict = self._strict_refresh if strict is None else strict
        return is_stale(self.refresh_state(), strict=strict, now=self._clock())

    def refresh(self) -> None:
        """Refresh metadata unconditionally; store errors propagate."""

        _LOGGER.info("Refreshing package metadata")
        self._store.refresh()

    def refresh_if_stale(
        self,
        *,
        strict: bool | None = None,
        confirm: Callable[[RefreshState], bool] | None = None,
    ) -> bool:
        """Refresh when metadata is stale; returns ``True`` if refreshed.

        ``confirm`` is consulted before refreshing; unattended callers pass
        ``None`` to refresh without asking.  Refresh failures are logged and
        the flow continues with the metadata already on disk.
        """

        state = self.refresh_state()
        strict = self._strict_refresh if strict is None else strict
        if not is_stale(state, strict=strict, now=self._clock()):
            _LOGGER.debug("Package metadata is fresh (last refresh %s)", state.last_refresh)
            return False
        if confirm is not None and not confirm(state):
            _LOGGER.info("Metadata refresh declined")
            return False
        try:
            self.refresh()
        except PackageStoreError as exc:
            _LOGGER.warning("Metadata refresh failed: %s", exc)
            return False
        return True

    def find_candidates(self, include_vc: bool = False) -> list[UpgradeCandidate]:
        self.check_mode(include_vc)
        candidates = resolve_candidates(
            self._store.installed_items(),
            self._store.catalog(),
            include_vc=include_vc,
        )
        if self._excluded:
            candidates = exclude_candidates(candidates, self._excluded)
        _LOGGER.debug("Found %d upgrade candidate(s)", len(candidates))
        return candidates

    def upgrade_all(
        self,
        include_vc: bool = False,
        *,
        on_complete: Callable[[], None] | None = None,
    ) -> BatchOutcome:
        candidates = self.find_candidates(include_vc)
        return self._runner.run_all(candidates, range(len(candidates)), on_complete=on_complete)

    def upgrade_named(
        self, names: Iterable[str], include_vc: bool = False
    ) -> tuple[BatchOutcome, list[str]]:
        """Upgrade only ``names``; returns the outcome and unknown names."""

        requested = list(dict.fromkeys(name.strip() for name in names if name and name.strip()))
        candidates = self.find_candidates(include_vc)
        positions = {candidate.name: index for index, candidate in enumerate(candidates)}
        missing = [name for name in requested if name not in positions]
        for name in missing:
            _LOGGER.info("%s has no available upgrade", name)
        indices = [positions[name] for name in requested if name in positions]
        return self._runner.run_all(candidates, indices), missing

    def upgrade_interactive(
        self,
        prompter: UpgradePrompter,
        include_vc: bool = False,
        *,
        unattended: bool = False,
    ) -> BatchOutcome:
        """Refresh stale metadata, let the user pick candidates, then upgrade.

        ``unattended`` refreshes without asking and uses the non-strict
        staleness threshold, as the scheduled job does.
        """

        self.check_mode(include_vc)
        if unattended:
            self.refresh_if_stale(strict=False)
        else:
            self.refresh_if_stale(confirm=prompter.confirm_refresh)

        candidates = self.find_candidates(include_vc)
        if not candidates:
            prompter.notify(UP_TO_DATE_MESSAGE)
            return BatchOutcome()

        if len(candidates) == 1:
            if not prompter.confirm_upgrade(candidates[0]):
                _LOGGER.info("Upgrade of %s declined", candidates[0].name)
                return BatchOutcome(candidates=tuple(candidates), cancelled=True)
            return self._runner.run_all(candidates, [0])

        session = SelectionSession(candidates)
        if not prompter.choose(session):
            _LOGGER.info("Upgrade selection cancelled")
            prompter.close()
            return BatchOutcome(candidates=session.candidates, cancelled=True)
        return self._runner.run_all(
            session.candidates, session.selected_indices(), on_complete=prompter.close
        )

    def run_scheduled(
        self, prompter: UpgradePrompter, include_vc: bool = False, *, auto: bool = False
    ) -> BatchOutcome:
        """Entry point fired by the daily scheduler."""

        if auto:
            self.check_mode(include_vc)
            self.refresh_if_stale(strict=False)
            outcome = self.upgrade_all(include_vc)
        else:
            outcome = self.upgrade_interactive(prompter, include_vc, unattended=True)
        prompter.report(outcome)
        return outcome


__all__ = ["UP_TO_DATE_MESSAGE", "UpgradeService"]
