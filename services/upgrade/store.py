"""Protocol describing the package store the upgrade engine drives."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Protocol

from domain.upgrades.models import AvailableItem, InstalledItem


class PackageStore(Protocol):
    """Source of package metadata and the primitives that mutate it.

    Mutating methods raise :class:`domain.upgrades.errors.PackageStoreError`
    when they fail.
    """

    def installed_items(self) -> Sequence[InstalledItem]:
        """Return installed packages in a stable order."""

    def catalog(self) -> Mapping[str, AvailableItem]:
        """Return the newest available release for each catalog name."""

    def last_refresh(self) -> datetime | None:
        """Return when metadata was last refreshed, or ``None`` if never."""

    def refresh(self) -> None:
        """Refresh package metadata from the upstream source."""

    def supports_vc(self) -> bool:
        """Return ``True`` when VC-tracked packages can be synchronised."""

    def install(self, available: AvailableItem, *, select: bool = True) -> None:
        """Install ``available``; ``select`` records it as user-requested."""

    def is_installed(self, available: AvailableItem) -> bool:
        """Return ``True`` when exactly this release is installed."""

    def delete(self, installed: InstalledItem, *, force: bool = False, keep_selected: bool = False) -> None:
        """Remove ``installed``; ``keep_selected`` preserves its bookkeeping."""

    def vc_sync(self, installed: InstalledItem) -> None:
        """Bring a VC-tracked checkout up to date."""


__all__ = ["PackageStore"]
