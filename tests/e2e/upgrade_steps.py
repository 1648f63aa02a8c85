from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

import pytest
from pytest_bdd import given, parsers, then, when

from domain.upgrades import UnsupportedModeError
from services.upgrade import BatchOutcome, UpgradeService
from tests.unit.upgrade_test_utils import RecordingPackageStore, ScriptedPrompter, available, installed
from ui.upgrade_list import SelectionController


@dataclass
class UpgradeWorld:
    store: RecordingPackageStore = field(
        default_factory=lambda: RecordingPackageStore(refreshed_at=datetime.now())
    )
    prompter: ScriptedPrompter = field(default_factory=ScriptedPrompter)
    outcome: BatchOutcome | None = None
    error: Exception | None = None

    def service(self) -> UpgradeService:
        return UpgradeService(self.store)


@pytest.fixture
def upgrade_world() -> UpgradeWorld:
    return UpgradeWorld()


@given(parsers.parse('package "{name}" version "{version}" is installed'))
def installed_package(upgrade_world: UpgradeWorld, name: str, version: str) -> None:
    upgrade_world.store.items.append(installed(name, version))


@given(parsers.parse('package "{name}" is a VC checkout'))
def vc_checkout(upgrade_world: UpgradeWorld, name: str) -> None:
    upgrade_world.store.items.append(installed(name, None, vc=True))


@given(parsers.parse('the catalog offers "{name}" version "{version}"'))
def catalog_offers(upgrade_world: UpgradeWorld, name: str, version: str) -> None:
    upgrade_world.store.releases[name] = available(name, version)


@given(parsers.parse('installing "{name}" fails'))
def install_fails(upgrade_world: UpgradeWorld, name: str) -> None:
    upgrade_world.store.fail_install.add(name)


@given("VC support is unavailable")
def vc_unavailable(upgrade_world: UpgradeWorld) -> None:
    upgrade_world.store.vc_supported = False


@when("the user upgrades everything including VC packages")
def upgrade_everything_with_vc(upgrade_world: UpgradeWorld) -> None:
    try:
        upgrade_world.outcome = upgrade_world.service().upgrade_all(include_vc=True)
    except UnsupportedModeError as exc:
        upgrade_world.error = exc


@when("the user upgrades everything")
def upgrade_everything(upgrade_world: UpgradeWorld) -> None:
    upgrade_world.outcome = upgrade_world.service().upgrade_all()


@when("the user opens the upgrade list")
def open_upgrade_list(upgrade_world: UpgradeWorld) -> None:
    upgrade_world.outcome = upgrade_world.service().upgrade_interactive(upgrade_world.prompter)


@when(parsers.parse("the user unselects row {row:d} and commits"))
def unselect_row_and_commit(upgrade_world: UpgradeWorld, row: int) -> None:
    def edit(session) -> None:
        SelectionController(session).handle_key("u", row)

    upgrade_world.prompter.edit = edit
    upgrade_world.outcome = upgrade_world.service().upgrade_interactive(upgrade_world.prompter)


@then(parsers.parse('"{name}" version "{version}" is installed before the old version is removed'))
def installed_before_removed(upgrade_world: UpgradeWorld, name: str, version: str) -> None:
    calls = upgrade_world.store.calls
    assert (name, version) in upgrade_world.store.installed_releases
    assert calls.index(("install", name)) < calls.index(("delete", name))


@then(parsers.parse('"{name}" is synchronised'))
def synchronised(upgrade_world: UpgradeWorld, name: str) -> None:
    assert ("vc_sync", name) in upgrade_world.store.calls
    assert ("install", name) not in upgrade_world.store.calls


@then("the run succeeds")
def run_succeeds(upgrade_world: UpgradeWorld) -> None:
    assert upgrade_world.outcome is not None
    assert upgrade_world.outcome.is_success


@then(parsers.parse('the user is told "{message}"'))
def user_told(upgrade_world: UpgradeWorld, message: str) -> None:
    assert upgrade_world.prompter.messages == [message]


@then("no package is changed")
def nothing_changed(upgrade_world: UpgradeWorld) -> None:
    assert upgrade_world.store.mutating_calls() == []


@then(parsers.parse('"{name}" version "{version}" is still installed'))
def still_installed(upgrade_world: UpgradeWorld, name: str, version: str) -> None:
    remaining = [(item.name, item.version) for item in upgrade_world.store.items]
    assert (name, version) in remaining
    assert ("delete", name) not in upgrade_world.store.calls


@then(parsers.parse('the run reports "{kind}" for "{name}"'))
def run_reports_failure(upgrade_world: UpgradeWorld, kind: str, name: str) -> None:
    assert upgrade_world.outcome is not None
    failures = {error.name: error.kind.value for error in upgrade_world.outcome.failures}
    assert failures == {name: kind}


@then(parsers.parse('only "{names}" are upgraded'))
def only_upgraded(upgrade_world: UpgradeWorld, names: str) -> None:
    expected = [name.strip() for name in names.split(",")]
    assert upgrade_world.outcome is not None
    assert upgrade_world.outcome.succeeded == expected
    installs = [name for action, name in upgrade_world.store.calls if action == "install"]
    assert installs == expected


@then("the upgrade list is closed")
def list_closed(upgrade_world: UpgradeWorld) -> None:
    assert upgrade_world.prompter.closed == 1


@then("the run is rejected as an unsupported mode")
def rejected_unsupported(upgrade_world: UpgradeWorld) -> None:
    assert isinstance(upgrade_world.error, UnsupportedModeError)
    assert upgrade_world.outcome is None
