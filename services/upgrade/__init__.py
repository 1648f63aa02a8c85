"""Public API for the upgrade service package."""

from __future__ import annotations

from services.upgrade.batch import BatchOutcome, BatchRunner
from services.upgrade.builder import build_upgrade_service, schedule_daily_upgrade
from services.upgrade.constants import MIRROR_ENV, STORE_ROOT_ENV
from services.upgrade.executor import UpgradeExecutor
from services.upgrade.local_store import LocalFolderPackageStore
from services.upgrade.prompts import UpgradePrompter
from services.upgrade.scheduler import RecurringScheduler, ScheduledJob, ScheduleSpec, parse_schedule
from services.upgrade.service import UP_TO_DATE_MESSAGE, UpgradeService
from services.upgrade.store import PackageStore

__all__ = [
    "MIRROR_ENV",
    "STORE_ROOT_ENV",
    "UP_TO_DATE_MESSAGE",
    "BatchOutcome",
    "BatchRunner",
    "LocalFolderPackageStore",
    "PackageStore",
    "RecurringScheduler",
    "ScheduleSpec",
    "ScheduledJob",
    "UpgradeExecutor",
    "UpgradePrompter",
    "UpgradeService",
    "build_upgrade_service",
    "parse_schedule",
    "schedule_daily_upgrade",
]
