"""Upgrade a single candidate against a package store."""

from __future__ import annotations

import logging

from domain.upgrades.errors import PackageStoreError, UpgradeError, UpgradeErrorKind
from domain.upgrades.models import AvailableItem, UpgradeCandidate
from services.upgrade.store import PackageStore
from shared.result import Result


_LOGGER = logging.getLogger(__name__)


class UpgradeExecutor:
    """Replace an installed package with its newer release.

    The old version is only removed once the store reports the new version
    as installed, so a failed install never leaves a package with zero
    installed versions.
    """

    def __init__(self, store: PackageStore) -> None:
        self._store = store

    def upgrade(self, candidate: UpgradeCandidate) -> Result[str, UpgradeError]:
        if candidate.is_vc_tracked:
            return self._sync(candidate)
        return self._replace(candidate)

    def _sync(self, candidate: UpgradeCandidate) -> Result[str, UpgradeError]:
        _LOGGER.info("Synchronising VC checkout %s", candidate.name)
        try:
            self._store.vc_sync(candidate.installed)
        except PackageStoreError as exc:
            _LOGGER.warning("VC sync failed for %s: %s", candidate.name, exc)
            return Result.err(UpgradeError(UpgradeErrorKind.VC_SYNC_FAILED, candidate.name, str(exc)))
        return Result.ok(candidate.name)

    def _replace(self, candidate: UpgradeCandidate) -> Result[str, UpgradeError]:
        installed = candidate.installed
        # Only VC candidates lack a release and those go through _sync.
        available: AvailableItem = candidate.available  # type: ignore[assignment]
        _LOGGER.info(
            "Upgrading %s: %s -> %s", candidate.name, installed.display_version, available.version
        )

        error: UpgradeError | None = None
        try:
            self._store.install(available, select=False)
        except PackageStoreError as exc:
            _LOGGER.warning("Install failed for %s %s: %s", candidate.name, available.version, exc)
            error = UpgradeError(UpgradeErrorKind.INSTALL_FAILED, candidate.name, str(exc))
        finally:
            if self._store.is_installed(available):
                _LOGGER.debug("Confirmed %s %s installed", candidate.name, available.version)
                try:
                    self._store.delete(installed, force=True, keep_selected=True)
                except PackageStoreError as exc:
                    _LOGGER.warning(
                        "Removing %s %s failed: %s",
                        candidate.name,
                        installed.display_version,
                        exc,
                    )
                    if error is None:
                        error = UpgradeError(UpgradeErrorKind.REMOVE_FAILED, candidate.name, str(exc))
            else:
                _LOGGER.debug(
                    "%s %s not installed; keeping %s",
                    candidate.name,
                    available.version,
                    installed.display_version,
                )
                if error is None:
                    error = UpgradeError(
                        UpgradeErrorKind.INSTALL_FAILED,
                        candidate.name,
                        f"{available.version} not reported as installed",
                    )

        if error is not None:
            return Result.err(error)
        return Result.ok(candidate.name)


__all__ = ["UpgradeExecutor"]
