from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from domain.upgrades.errors import PackageStoreError
from domain.upgrades.models import AvailableItem, InstalledItem, RefreshState, UpgradeCandidate
from viewmodels.selection_session import SelectionSession


def installed(name: str, version: str | None = "1.0", *, vc: bool = False) -> InstalledItem:
    return InstalledItem(name=name, version=version, handle=f"installed/{name}", vc_tracked=vc)


def available(name: str, version: str) -> AvailableItem:
    return AvailableItem(name=name, version=version, handle=f"mirror/{name}-{version}")


def candidate(name: str, old: str | None, new: str | None = None, *, vc: bool = False) -> UpgradeCandidate:
    if vc:
        return UpgradeCandidate(installed(name, old, vc=True), None)
    assert new is not None
    return UpgradeCandidate(installed(name, old), available(name, new))


@dataclass
class RecordingPackageStore:
    """In-memory package store that records every call in order."""

    items: list[InstalledItem] = field(default_factory=list)
    releases: dict[str, AvailableItem] = field(default_factory=dict)
    refreshed_at: datetime | None = None
    vc_supported: bool = True
    fail_install: set[str] = field(default_factory=set)
    partial_install: set[str] = field(default_factory=set)
    silent_install: set[str] = field(default_factory=set)
    fail_delete: set[str] = field(default_factory=set)
    fail_sync: set[str] = field(default_factory=set)
    fail_refresh: bool = False
    calls: list[tuple[str, str]] = field(default_factory=list)
    installed_releases: set[tuple[str, str]] = field(default_factory=set)
    selected: set[str] = field(default_factory=set)

    def installed_items(self) -> list[InstalledItem]:
        self.calls.append(("installed_items", ""))
        return list(self.items)

    def catalog(self) -> dict[str, AvailableItem]:
        self.calls.append(("catalog", ""))
        return dict(self.releases)

    def last_refresh(self) -> datetime | None:
        return self.refreshed_at

    def refresh(self) -> None:
        self.calls.append(("refresh", ""))
        if self.fail_refresh:
            raise PackageStoreError("mirror unreachable")
        self.refreshed_at = datetime.now()

    def supports_vc(self) -> bool:
        return self.vc_supported

    def install(self, available: AvailableItem, *, select: bool = True) -> None:
        self.calls.append(("install", available.name))
        if available.name in self.partial_install:
            self.installed_releases.add((available.name, available.version))
            raise PackageStoreError(f"post-install step failed for {available.name}")
        if available.name in self.fail_install:
            raise PackageStoreError(f"payload missing for {available.name}")
        if available.name in self.silent_install:
            return
        self.installed_releases.add((available.name, available.version))
        if select:
            self.selected.add(available.name)

    def is_installed(self, available: AvailableItem) -> bool:
        self.calls.append(("is_installed", available.name))
        return (available.name, available.version) in self.installed_releases

    def delete(self, installed: InstalledItem, *, force: bool = False, keep_selected: bool = False) -> None:
        self.calls.append(("delete", installed.name))
        if installed.name in self.fail_delete:
            raise PackageStoreError(f"permission denied removing {installed.name}")
        self.items = [item for item in self.items if item is not installed]
        if not keep_selected:
            self.selected.discard(installed.name)

    def vc_sync(self, installed: InstalledItem) -> None:
        self.calls.append(("vc_sync", installed.name))
        if installed.name in self.fail_sync:
            raise PackageStoreError(f"git pull failed for {installed.name}")

    def mutating_calls(self) -> list[tuple[str, str]]:
        return [call for call in self.calls if call[0] in {"install", "delete", "vc_sync", "refresh"}]


@dataclass
class ScriptedPrompter:
    """Prompter whose answers are queued up front."""

    refresh_answer: bool = False
    upgrade_answer: bool = True
    commit: bool = True
    edit: object = None
    messages: list[str] = field(default_factory=list)
    refresh_questions: list[RefreshState] = field(default_factory=list)
    upgrade_questions: list[UpgradeCandidate] = field(default_factory=list)
    sessions: list[SelectionSession] = field(default_factory=list)
    closed: int = 0
    reports: list[object] = field(default_factory=list)

    def confirm_refresh(self, state: RefreshState) -> bool:
        self.refresh_questions.append(state)
        return self.refresh_answer

    def confirm_upgrade(self, candidate: UpgradeCandidate) -> bool:
        self.upgrade_questions.append(candidate)
        return self.upgrade_answer

    def choose(self, session: SelectionSession) -> bool:
        self.sessions.append(session)
        if callable(self.edit):
            self.edit(session)
        return self.commit

    def close(self) -> None:
        self.closed += 1

    def notify(self, message: str) -> None:
        self.messages.append(message)

    def report(self, outcome: object) -> None:
        self.reports.append(outcome)


def write_mirror(mirror: Path, packages: dict[str, str]) -> Path:
    """Create payload directories and a catalog.json for ``packages``."""

    entries = {}
    for name, version in packages.items():
        payload = mirror / "packages" / f"{name}-{version}"
        payload.mkdir(parents=True, exist_ok=True)
        (payload / f"{name}.el").write_text(f";; {name} {version}\n", encoding="utf-8")
        entries[name] = {"version": version, "path": f"packages/{name}-{version}"}
    mirror.mkdir(parents=True, exist_ok=True)
    catalog_path = mirror / "catalog.json"
    catalog_path.write_text(json.dumps({"packages": entries}), encoding="utf-8")
    return catalog_path


def install_package(root: Path, name: str, version: str) -> Path:
    path = root / "installed" / f"{name}-{version}"
    path.mkdir(parents=True, exist_ok=True)
    (path / f"{name}.el").write_text(f";; {name} {version}\n", encoding="utf-8")
    return path


__all__ = [
    "RecordingPackageStore",
    "ScriptedPrompter",
    "available",
    "candidate",
    "install_package",
    "installed",
    "write_mirror",
]
