"""Domain model and policies for package upgrades."""

from domain.upgrades.errors import (
    IndexOutOfRangeError,
    InvalidScheduleError,
    PackageStoreError,
    UnsupportedModeError,
    UpgradeError,
    UpgradeErrorKind,
)
from domain.upgrades.models import AvailableItem, InstalledItem, RefreshState, UpgradeCandidate
from domain.upgrades.resolver import exclude_candidates, resolve_candidates
from domain.upgrades.schedule import ScheduleSpec, parse_schedule
from domain.upgrades.staleness import effective_threshold, elapsed_days, is_stale, should_refresh
from domain.upgrades.versioning import compare_versions, is_upgrade, is_version_newer

__all__ = [
    "AvailableItem",
    "IndexOutOfRangeError",
    "InstalledItem",
    "InvalidScheduleError",
    "PackageStoreError",
    "RefreshState",
    "ScheduleSpec",
    "UnsupportedModeError",
    "UpgradeCandidate",
    "UpgradeError",
    "UpgradeErrorKind",
    "compare_versions",
    "effective_threshold",
    "elapsed_days",
    "exclude_candidates",
    "is_stale",
    "is_upgrade",
    "is_version_newer",
    "parse_schedule",
    "resolve_candidates",
    "should_refresh",
]
