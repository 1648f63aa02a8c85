"""Package store backed by plain directories on the local file system."""

from __future__ import annotations

import json
import logging
import os
import shutil
import stat
import subprocess
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

from domain.upgrades.errors import PackageStoreError
from domain.upgrades.models import AvailableItem, InstalledItem
from domain.upgrades.versioning import compare_versions
from services.upgrade.constants import (
    ARCHIVE_DIRNAME,
    CATALOG_FILENAME,
    GIT_SYNC_COMMAND,
    GIT_SYNC_TIMEOUT_SECONDS,
    INSTALLED_DIRNAME,
    SELECTED_FILENAME,
    STAGING_SUFFIX,
    VC_MARKER,
    VC_VERSION_FILENAME,
)


_LOGGER = logging.getLogger(__name__)


class LocalFolderPackageStore:
    """Serve installed packages and catalog metadata from local directories.

    ``root`` holds ``installed/<name>-<version>/`` package directories, VC
    checkouts under ``installed/<name>/`` and the cached catalog in
    ``archive/catalog.json``.  ``mirror`` is the upstream folder whose
    ``catalog.json`` is copied by :meth:`refresh`.
    """

    def __init__(self, root: Path, mirror: Path | None = None) -> None:
        self._root = Path(root)
        self._mirror = Path(mirror) if mirror is not None else None

    @property
    def root(self) -> Path:
        return self._root

    @property
    def installed_dir(self) -> Path:
        return self._root / INSTALLED_DIRNAME

    @property
    def catalog_path(self) -> Path:
        return self._root / ARCHIVE_DIRNAME / CATALOG_FILENAME

    @property
    def selected_path(self) -> Path:
        return self._root / SELECTED_FILENAME

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------
    def installed_items(self) -> list[InstalledItem]:
        if not self.installed_dir.is_dir():
            _LOGGER.debug("Installed package directory missing: %s", self.installed_dir)
            return []

        newest: dict[str, InstalledItem] = {}
        for entry in sorted(self.installed_dir.iterdir()):
            if not entry.is_dir() or entry.name.endswith(STAGING_SUFFIX):
                continue
            item = self._describe_installed(entry)
            if item is None:
                _LOGGER.debug("Ignoring unrecognised package directory %s", entry)
                continue
            current = newest.get(item.name)
            if current is None or _newer_installed(item, current):
                if current is not None:
                    _LOGGER.debug(
                        "Multiple versions of %s installed; reporting %s",
                        item.name,
                        item.display_version,
                    )
                newest[item.name] = item
        return [newest[name] for name in sorted(newest)]

    def catalog(self) -> dict[str, AvailableItem]:
        data = self._read_json(self.catalog_path)
        if not isinstance(data, Mapping):
            return {}
        packages = data.get("packages")
        if not isinstance(packages, Mapping):
            _LOGGER.debug("Catalog %s has no package table", self.catalog_path)
            return {}

        source = data.get("source")
        source_root = Path(source) if isinstance(source, str) and source else self._mirror
        catalog: dict[str, AvailableItem] = {}
        for name, raw_entry in packages.items():
            if not isinstance(name, str) or not name.strip():
                continue
            entries = raw_entry if isinstance(raw_entry, list) else [raw_entry]
            for entry in entries:
                available = _parse_catalog_entry(name.strip(), entry, source_root)
                if available is None:
                    continue
                current = catalog.get(available.name)
                if current is None or compare_versions(current.version, available.version) > 0:
                    catalog[available.name] = available
        return catalog

    def last_refresh(self) -> datetime | None:
        try:
            mtime = self.catalog_path.stat().st_mtime
        except OSError:
            return None
        return datetime.fromtimestamp(mtime)

    def refresh(self) -> None:
        if self._mirror is None:
            raise PackageStoreError("No package mirror configured; cannot refresh metadata")
        upstream = self._mirror / CATALOG_FILENAME
        try:
            data = json.loads(upstream.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise PackageStoreError(f"Failed to read upstream catalog {upstream}: {exc}") from exc
        if not isinstance(data, dict):
            raise PackageStoreError(f"Upstream catalog {upstream} is not a JSON object")

        data["source"] = str(self._mirror.resolve())
        target = self.catalog_path
        temporary = target.with_name(target.name + STAGING_SUFFIX)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            temporary.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8")
            os.replace(temporary, target)
        except OSError as exc:
            raise PackageStoreError(f"Failed to write catalog cache {target}: {exc}") from exc
        _LOGGER.info("Refreshed package metadata from %s", self._mirror)

    def supports_vc(self) -> bool:
        return shutil.which(GIT_SYNC_COMMAND[0]) is not None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def install(self, available: AvailableItem, *, select: bool = True) -> None:
        target = self._release_path(available)
        if target.is_dir():
            _LOGGER.info("%s %s already installed", available.name, available.version)
        else:
            source = Path(available.handle) if available.handle is not None else None
            if source is None or not source.is_dir():
                raise PackageStoreError(
                    f"Package payload for {available.name} {available.version} not found: {source}"
                )
            staging = target.with_name(target.name + STAGING_SUFFIX)
            try:
                if staging.exists():
                    shutil.rmtree(staging)
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copytree(source, staging)
                staging.rename(target)
            except OSError as exc:
                shutil.rmtree(staging, ignore_errors=True)
                raise PackageStoreError(
                    f"Failed to install {available.name} {available.version}: {exc}"
                ) from exc
            _LOGGER.info("Installed %s %s into %s", available.name, available.version, target)

        if select:
            self._update_selected(available.name, add=True)

    def is_installed(self, available: AvailableItem) -> bool:
        return self._release_path(available).is_dir()

    def delete(self, installed: InstalledItem, *, force: bool = False, keep_selected: bool = False) -> None:
        path = Path(installed.handle) if installed.handle is not None else None
        if path is None or not path.exists():
            raise PackageStoreError(f"Installed package {installed.name} not found at {path}")
        try:
            shutil.rmtree(path)
        except OSError as exc:
            if not force:
                raise PackageStoreError(f"Failed to delete {installed.name}: {exc}") from exc
            _LOGGER.debug("Retrying forced removal of %s after %s", path, exc)
            try:
                _make_tree_writable(path)
                shutil.rmtree(path)
            except OSError as retry_exc:
                raise PackageStoreError(
                    f"Failed to delete {installed.name}: {retry_exc}"
                ) from retry_exc
        _LOGGER.info("Deleted %s %s", installed.name, installed.display_version)

        if not keep_selected:
            self._update_selected(installed.name, add=False)

    def vc_sync(self, installed: InstalledItem) -> None:
        path = Path(installed.handle) if installed.handle is not None else None
        if path is None or not (path / VC_MARKER).exists():
            raise PackageStoreError(f"{installed.name} is not a VC checkout: {path}")
        try:
            completed = subprocess.run(
                list(GIT_SYNC_COMMAND),
                cwd=str(path),
                check=True,
                capture_output=True,
                text=True,
                timeout=GIT_SYNC_TIMEOUT_SECONDS,
            )
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or exc.stdout or "").strip()
            raise PackageStoreError(f"git pull failed for {installed.name}: {detail}") from exc
        except (OSError, subprocess.SubprocessError) as exc:
            raise PackageStoreError(f"Failed to run git for {installed.name}: {exc}") from exc
        _LOGGER.info("Synchronised %s: %s", installed.name, completed.stdout.strip())

    def selected_names(self) -> list[str]:
        data = self._read_json(self.selected_path)
        if not isinstance(data, list):
            return []
        return [name for name in data if isinstance(name, str) and name]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _release_path(self, available: AvailableItem) -> Path:
        return self.installed_dir / f"{available.name}-{available.version}"

    def _describe_installed(self, entry: Path) -> InstalledItem | None:
        if (entry / VC_MARKER).exists():
            return InstalledItem(
                name=entry.name,
                version=_read_vc_version(entry),
                handle=entry,
                vc_tracked=True,
            )
        name, separator, version = entry.name.rpartition("-")
        if not separator or not name or not version[:1].isdigit():
            return None
        return InstalledItem(name=name, version=version, handle=entry)

    def _update_selected(self, name: str, *, add: bool) -> None:
        names = self.selected_names()
        if add and name not in names:
            names.append(name)
        elif not add and name in names:
            names.remove(name)
        else:
            return
        try:
            self.selected_path.parent.mkdir(parents=True, exist_ok=True)
            self.selected_path.write_text(json.dumps(sorted(names), indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise PackageStoreError(f"Failed to update {self.selected_path}: {exc}") from exc

    @staticmethod
    def _read_json(path: Path) -> Any:
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            _LOGGER.warning("Ignoring malformed JSON in %s: %s", path, exc)
            return None


def _parse_catalog_entry(name: str, entry: object, source_root: Path | None) -> AvailableItem | None:
    if not isinstance(entry, Mapping):
        return None
    version = str(entry.get("version", "")).strip()
    if not version:
        _LOGGER.debug("Catalog entry for %s has no version", name)
        return None
    raw_path = entry.get("path")
    handle: Path | None = None
    if isinstance(raw_path, str) and raw_path.strip():
        handle = Path(raw_path.strip())
        if not handle.is_absolute() and source_root is not None:
            handle = source_root / handle
    return AvailableItem(name=name, version=version, handle=handle)


def _newer_installed(candidate: InstalledItem, current: InstalledItem) -> bool:
    if candidate.vc_tracked != current.vc_tracked:
        return candidate.vc_tracked
    if not candidate.version:
        return False
    if not current.version:
        return True
    return compare_versions(current.version, candidate.version) > 0


def _read_vc_version(checkout: Path) -> str | None:
    try:
        text = (checkout / VC_VERSION_FILENAME).read_text(encoding="utf-8")
    except OSError:
        return None
    return text.strip() or None


def _make_tree_writable(path: Path) -> None:
    for candidate in [path, *path.rglob("*")]:
        try:
            mode = candidate.stat().st_mode
            os.chmod(candidate, mode | stat.S_IWRITE | stat.S_IREAD | stat.S_IEXEC)
        except OSError:
            continue


__all__ = ["LocalFolderPackageStore"]
