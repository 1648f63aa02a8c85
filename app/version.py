"""Report the bumpkit version."""

from __future__ import annotations

import os
import subprocess
from functools import lru_cache
from importlib import metadata, resources

_DISTRIBUTION = "bumpkit"
_VERSION_ENV = "BUMPKIT_APP_VERSION"
_FALLBACK_VERSION = "0.0.0-dev"


def _strip_tag_prefix(raw_version: str) -> str:
    version = raw_version.strip()
    return version[1:] if version.startswith("v") else version


def _from_env() -> str | None:
    value = os.environ.get(_VERSION_ENV)
    return _strip_tag_prefix(value) if value else None


def _from_version_file() -> str | None:
    try:
        text = resources.files("app").joinpath("VERSION").read_text(encoding="utf-8")
    except (FileNotFoundError, ModuleNotFoundError, OSError):
        return None
    return _strip_tag_prefix(text) or None


def _from_git() -> str | None:
    try:
        output = subprocess.check_output(
            ["git", "describe", "--tags", "--dirty"],
            stderr=subprocess.DEVNULL,
            text=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    return _strip_tag_prefix(output) or None


def _from_distribution() -> str | None:
    try:
        return metadata.version(_DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return None


@lru_cache(maxsize=1)
def get_app_version() -> str:
    """Return the application version.

    The order of precedence is ``BUMPKIT_APP_VERSION``, the bundled
    ``app/VERSION`` file, ``git describe`` in a source checkout and finally
    the installed distribution metadata.
    """

    for resolver in (_from_env, _from_version_file, _from_git, _from_distribution):
        version = resolver()
        if version:
            return version
    return _FALLBACK_VERSION


__all__ = ["get_app_version"]
