"""Bundled defaults for refresh cadence, store location and exclusions.

``app.json`` ships next to this module.  Every section is optional and any
value of the wrong type falls back to its default, so a hand-edited file can
never stop the tool from starting.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Mapping

_LOGGER = logging.getLogger(__name__)

_CONFIG_RESOURCE = "app.json"
_cached_config: AppConfig | None = None

_DEFAULT_INTERVAL_DAYS = 7
_DEFAULT_STORE_ROOT = "~/.bumpkit/packages"


@dataclass(frozen=True)
class RefreshConfig:
    """How often package metadata should be refreshed."""

    interval_days: int = _DEFAULT_INTERVAL_DAYS
    strict: bool = True


@dataclass(frozen=True)
class StoreConfig:
    """Locations of the local package store and its upstream mirror."""

    root: Path
    mirror: Path | None = None


@dataclass(frozen=True)
class AppConfig:
    refresh: RefreshConfig
    store: StoreConfig
    excluded_packages: tuple[str, ...] = ()


def get_app_config() -> AppConfig:
    """Return the bundled configuration, loading it on first use."""

    global _cached_config
    if _cached_config is None:
        _cached_config = load_app_config()
    return _cached_config


def reset_app_config_cache() -> None:
    global _cached_config
    _cached_config = None


def load_app_config(path: str | Path | None = None) -> AppConfig:
    """Parse ``path``, or the bundled ``app.json`` when ``path`` is ``None``."""

    data = _read_mapping(path)
    refresh = data.get("refresh")
    store = data.get("store")
    if not isinstance(refresh, Mapping):
        refresh = {}
    if not isinstance(store, Mapping):
        store = {}

    strict = refresh.get("strict")
    return AppConfig(
        refresh=RefreshConfig(
            interval_days=_positive_int(refresh.get("interval_days"), _DEFAULT_INTERVAL_DAYS),
            strict=strict if isinstance(strict, bool) else True,
        ),
        store=StoreConfig(
            root=_path_or_none(store.get("root")) or Path(_DEFAULT_STORE_ROOT).expanduser(),
            mirror=_path_or_none(store.get("mirror")),
        ),
        excluded_packages=_unique_names(data.get("excluded_packages")),
    )


def _read_mapping(path: str | Path | None) -> Mapping[str, Any]:
    try:
        if path is None:
            raw = resources.files(__package__).joinpath(_CONFIG_RESOURCE).read_text(encoding="utf-8")
        else:
            raw = Path(path).expanduser().read_text(encoding="utf-8")
        data = json.loads(raw)
    except OSError as exc:
        _LOGGER.debug("Configuration %s unavailable: %s", path or _CONFIG_RESOURCE, exc)
        return {}
    except json.JSONDecodeError as exc:
        _LOGGER.warning("Ignoring malformed configuration %s: %s", path or _CONFIG_RESOURCE, exc)
        return {}
    return data if isinstance(data, Mapping) else {}


def _positive_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if isinstance(value, int) and value > 0:
        return value
    return default


def _path_or_none(value: Any) -> Path | None:
    if isinstance(value, str) and value.strip():
        return Path(value.strip()).expanduser()
    return None


def _unique_names(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    names = (entry.strip() for entry in value if isinstance(entry, str))
    return tuple(dict.fromkeys(name for name in names if name))


__all__ = [
    "AppConfig",
    "RefreshConfig",
    "StoreConfig",
    "get_app_config",
    "load_app_config",
    "reset_app_config_cache",
]
