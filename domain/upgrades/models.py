"""Value objects describing installed packages and upgrade candidates."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class InstalledItem:
    """A package currently present in the package store.

    ``handle`` is opaque to the domain; stores use it to locate the installed
    copy.  ``version`` is ``None`` for unversioned checkouts.
    """

    name: str
    version: str | None
    handle: Any = None
    vc_tracked: bool = False

    @property
    def display_version(self) -> str:
        return self.version or "unversioned"


@dataclass(frozen=True)
class AvailableItem:
    """A package version offered by the catalog."""

    name: str
    version: str
    handle: Any = None


@dataclass(frozen=True)
class UpgradeCandidate:
    """An installed package paired with the release that supersedes it."""

    installed: InstalledItem
    available: AvailableItem | None = None

    def __post_init__(self) -> None:
        if self.installed.vc_tracked and self.available is not None:
            raise ValueError(f"VC-tracked candidate {self.installed.name} cannot carry a release")
        if not self.installed.vc_tracked and self.available is None:
            raise ValueError(f"Candidate {self.installed.name} is missing its available release")

    @property
    def name(self) -> str:
        return self.installed.name

    @property
    def is_vc_tracked(self) -> bool:
        return self.available is None


@dataclass(frozen=True)
class RefreshState:
    """Snapshot of when package metadata was last refreshed."""

    last_refresh: datetime | None
    interval_days: int

    def __post_init__(self) -> None:
        if isinstance(self.interval_days, bool) or not isinstance(self.interval_days, int):
            raise ValueError(f"Refresh interval must be an integer: {self.interval_days!r}")
        if self.interval_days <= 0:
            raise ValueError(f"Refresh interval must be positive: {self.interval_days}")


__all__ = ["AvailableItem", "InstalledItem", "RefreshState", "UpgradeCandidate"]
