"""Helpers for persisting user preferences between runs."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

from domain.upgrades.errors import InvalidScheduleError
from domain.upgrades.schedule import parse_schedule
from shared.logging_config import LogVerbosity

_ENV_PREFERENCES_PATH = "BUMPKIT_PREFERENCES_PATH"

_LOG_VERBOSITIES = {verbosity.value for verbosity in LogVerbosity}


@dataclass
class Preferences:
    """Serializable preferences persisted between runs."""

    log_verbosity: str | None = None
    refresh_interval_days: int | None = None
    include_vc: bool | None = None
    excluded_packages: list[str] = field(default_factory=list)
    schedule_time: str | None = None
    auto_upgrade: bool | None = None


def _default_preferences_path() -> Path:
    """Return the configured preferences path, falling back to the user home."""

    override = os.environ.get(_ENV_PREFERENCES_PATH)
    if override:
        return Path(override)
    return Path.home() / ".bumpkit" / "preferences.json"


def load_preferences(path: Path | None = None) -> Preferences:
    """Load persisted preferences, returning defaults when missing or invalid."""

    location = path or _default_preferences_path()
    try:
        raw = location.read_text(encoding="utf-8")
    except OSError:
        return Preferences()

    try:
        data: Dict[str, Any] = json.loads(raw)
    except json.JSONDecodeError:
        return Preferences()
    if not isinstance(data, dict):
        return Preferences()

    log_verbosity = data.get("log_verbosity")
    if not isinstance(log_verbosity, str) or log_verbosity.lower() not in _LOG_VERBOSITIES:
        log_verbosity = None
    else:
        log_verbosity = log_verbosity.lower()

    raw_interval = data.get("refresh_interval_days")
    if isinstance(raw_interval, int) and not isinstance(raw_interval, bool) and raw_interval > 0:
        refresh_interval_days = raw_interval
    else:
        refresh_interval_days = None

    include_vc = _coerce_bool(data.get("include_vc"))
    auto_upgrade = _coerce_bool(data.get("auto_upgrade"))

    excluded: list[str] = []
    raw_excluded = data.get("excluded_packages", [])
    if isinstance(raw_excluded, list):
        for entry in raw_excluded:
            if isinstance(entry, str) and entry.strip() and entry.strip() not in excluded:
                excluded.append(entry.strip())

    schedule_time = data.get("schedule_time")
    if isinstance(schedule_time, str):
        try:
            parse_schedule(schedule_time)
        except InvalidScheduleError:
            schedule_time = None
    else:
        schedule_time = None

    return Preferences(
        log_verbosity=log_verbosity,
        refresh_interval_days=refresh_interval_days,
        include_vc=include_vc,
        excluded_packages=excluded,
        schedule_time=schedule_time,
        auto_upgrade=auto_upgrade,
    )


def save_preferences(preferences: Preferences, path: Path | None = None) -> None:
    """Persist preferences to disk, ignoring filesystem errors."""

    location = path or _default_preferences_path()
    data: Dict[str, Any] = {}
    if preferences.log_verbosity in _LOG_VERBOSITIES:
        data["log_verbosity"] = preferences.log_verbosity
    if isinstance(preferences.refresh_interval_days, int) and preferences.refresh_interval_days > 0:
        data["refresh_interval_days"] = preferences.refresh_interval_days
    if isinstance(preferences.include_vc, bool):
        data["include_vc"] = preferences.include_vc
    if preferences.excluded_packages:
        data["excluded_packages"] = list(dict.fromkeys(preferences.excluded_packages))
    if preferences.schedule_time:
        data["schedule_time"] = preferences.schedule_time
    if isinstance(preferences.auto_upgrade, bool):
        data["auto_upgrade"] = preferences.auto_upgrade

    try:
        location.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(data, indent=2, sort_keys=True) + "\n"
        location.write_text(payload, encoding="utf-8")
    except OSError:
        # Preference persistence is best-effort; ignore filesystem errors.
        return


def _coerce_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "t", "yes", "on"}:
            return True
        if normalized in {"0", "false", "f", "no", "off"}:
            return False
    return None


__all__ = ["Preferences", "load_preferences", "save_preferences"]
