"""Decide whether package metadata is stale enough to refresh."""

from __future__ import annotations

from datetime import datetime

from domain.upgrades.models import RefreshState


def effective_threshold(interval_days: int, *, strict: bool) -> int:
    """Return the elapsed-day threshold for ``interval_days``.

    The non-strict threshold is one day shorter so a job that fires once a
    day does not miss the boundary by a few seconds of timer jitter.
    """

    if isinstance(interval_days, bool) or not isinstance(interval_days, int) or interval_days <= 0:
        raise ValueError(f"Refresh interval must be a positive integer: {interval_days!r}")
    return interval_days if strict else interval_days - 1


def elapsed_days(last_refresh: datetime, now: datetime) -> int:
    """Whole days between ``last_refresh`` and ``now`` (never negative)."""

    return max(0, (now - last_refresh).days)


def should_refresh(
    last_refresh: datetime | None,
    interval_days: int,
    *,
    strict: bool = True,
    now: datetime | None = None,
) -> bool:
    """Return ``True`` when a metadata refresh should be offered."""

    threshold = effective_threshold(interval_days, strict=strict)
    if last_refresh is None:
        return True
    current = now or datetime.now()
    return elapsed_days(last_refresh, current) >= threshold


def is_stale(state: RefreshState, *, strict: bool = True, now: datetime | None = None) -> bool:
    return should_refresh(state.last_refresh, state.interval_days, strict=strict, now=now)


__all__ = ["effective_threshold", "elapsed_days", "is_stale", "should_refresh"]
