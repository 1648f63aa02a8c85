"""Helpers for constructing the upgrade service and its daily schedule."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from app.config import AppConfig, get_app_config
from app.preferences import Preferences, load_preferences
from domain.upgrades.errors import PackageStoreError
from services.upgrade.constants import MIRROR_ENV, STORE_ROOT_ENV
from services.upgrade.local_store import LocalFolderPackageStore
from services.upgrade.prompts import UpgradePrompter
from services.upgrade.scheduler import RecurringScheduler, ScheduledJob, parse_schedule
from services.upgrade.service import UpgradeService


_LOGGER = logging.getLogger(__name__)


def _resolve_path(explicit: Path | None, env_var: str, configured: Path | None) -> Path | None:
    if explicit is not None:
        return Path(explicit).expanduser()
    from_env = os.environ.get(env_var)
    if from_env:
        return Path(from_env).expanduser()
    return configured


def build_upgrade_service(
    *,
    store_root: Path | None = None,
    mirror: Path | None = None,
    interval_days: int | None = None,
    preferences: Preferences | None = None,
    config: AppConfig | None = None,
) -> UpgradeService:
    """Construct an :class:`UpgradeService` backed by the local package store.

    Explicit arguments win over environment variables, which win over user
    preferences and finally the bundled configuration.
    """

    config = config or get_app_config()
    preferences = preferences or load_preferences()

    root = _resolve_path(store_root, STORE_ROOT_ENV, config.store.root)
    if root is None:
        raise PackageStoreError(f"No package store root configured; set {STORE_ROOT_ENV} or pass a root")
    upstream = _resolve_path(mirror, MIRROR_ENV, config.store.mirror)
    if upstream is None:
        _LOGGER.debug("No package mirror configured; metadata refresh is unavailable")

    interval = interval_days or preferences.refresh_interval_days or config.refresh.interval_days
    excluded = list(dict.fromkeys([*config.excluded_packages, *preferences.excluded_packages]))

    _LOGGER.debug(
        "Using package store %s (mirror=%s, interval=%s days, excluded=%s)",
        root,
        upstream,
        interval,
        excluded,
    )
    store = LocalFolderPackageStore(root, upstream)
    return UpgradeService(
        store,
        interval_days=interval,
        strict_refresh=config.refresh.strict,
        excluded=excluded,
    )


def schedule_daily_upgrade(
    service: UpgradeService,
    prompter: UpgradePrompter,
    time_of_day: str,
    *,
    include_vc: bool = False,
    auto: bool = False,
    scheduler: RecurringScheduler | None = None,
) -> ScheduledJob:
    """Fire the unattended upgrade flow every day at ``time_of_day``.

    The time and the VC mode are validated before any timer is armed.
    """

    spec = parse_schedule(time_of_day)
    service.check_mode(include_vc)
    scheduler = scheduler or RecurringScheduler()

    def _run() -> None:
        service.run_scheduled(prompter, include_vc, auto=auto)

    return scheduler.schedule(spec, _run)


__all__ = ["build_upgrade_service", "schedule_daily_upgrade"]
