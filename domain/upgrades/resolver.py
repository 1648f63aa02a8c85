"""Derive upgrade candidates from installed packages and a catalog."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from domain.upgrades.errors import UnsupportedModeError
from domain.upgrades.models import AvailableItem, InstalledItem, UpgradeCandidate
from domain.upgrades.versioning import is_upgrade


def resolve_candidates(
    installed_items: Iterable[InstalledItem],
    catalog: Mapping[str, AvailableItem],
    *,
    include_vc: bool = False,
    vc_supported: bool = True,
) -> list[UpgradeCandidate]:
    """Return the packages that can be upgraded, in installed order.

    VC-tracked packages are included (with no release attached) only when
    ``include_vc`` is set; they bypass the version comparison entirely.
    """

    if include_vc and not vc_supported:
        raise UnsupportedModeError("VC-tracked upgrades requested but VC support is unavailable")

    candidates: list[UpgradeCandidate] = []
    for item in installed_items:
        if item.vc_tracked:
            if include_vc:
                candidates.append(UpgradeCandidate(item, None))
            continue
        available = catalog.get(item.name)
        if available is not None and is_upgrade(item, available):
            candidates.append(UpgradeCandidate(item, available))
    return candidates


def exclude_candidates(
    candidates: Iterable[UpgradeCandidate], excluded: Iterable[str]
) -> list[UpgradeCandidate]:
    """Drop candidates whose names appear in ``excluded`` while keeping order."""

    blocked = {name.strip() for name in excluded if name and name.strip()}
    return [candidate for candidate in candidates if candidate.name not in blocked]


__all__ = ["exclude_candidates", "resolve_candidates"]
