from __future__ import annotations

import logging

import pytest

from domain.upgrades import IndexOutOfRangeError, UpgradeErrorKind
from services.upgrade import BatchRunner, UpgradeExecutor
from tests.unit.upgrade_test_utils import RecordingPackageStore, candidate


def _runner(store: RecordingPackageStore) -> BatchRunner:
    return BatchRunner(UpgradeExecutor(store))


def test_one_failure_does_not_stop_the_batch() -> None:
    candidates = [candidate("a", "1.0", "1.1"), candidate("b", "1.0", "1.1"), candidate("c", "1.0", "1.1")]
    store = RecordingPackageStore(items=[item.installed for item in candidates])
    store.fail_install.add("b")

    outcome = _runner(store).run_all(candidates, [0, 1, 2])

    assert outcome.attempted == [0, 1, 2]
    assert outcome.succeeded == ["a", "c"]
    assert outcome.failed == ["b"]
    assert outcome.failures[0].kind is UpgradeErrorKind.INSTALL_FAILED
    assert outcome.is_success is False
    assert [call for call in store.mutating_calls() if call[0] == "install"] == [
        ("install", "a"),
        ("install", "b"),
        ("install", "c"),
    ]


def test_indices_run_in_ascending_order_once_each() -> None:
    candidates = [candidate(name, "1.0", "2.0") for name in "abcd"]
    store = RecordingPackageStore(items=[item.installed for item in candidates])

    outcome = _runner(store).run_all(candidates, [3, 1, 3])

    assert outcome.attempted == [1, 3]
    assert [call for call in store.mutating_calls() if call[0] == "install"] == [
        ("install", "b"),
        ("install", "d"),
    ]


def test_completion_hook_runs_for_empty_selection() -> None:
    calls: list[str] = []
    store = RecordingPackageStore()

    outcome = _runner(store).run_all([candidate("a", "1", "2")], [], on_complete=lambda: calls.append("done"))

    assert calls == ["done"]
    assert outcome.attempted == []
    assert outcome.is_success is True
    assert store.mutating_calls() == []


def test_completion_hook_runs_after_failures() -> None:
    calls: list[str] = []
    store = RecordingPackageStore()
    store.fail_install.add("a")

    _runner(store).run_all([candidate("a", "1", "2")], [0], on_complete=lambda: calls.append("done"))

    assert calls == ["done"]


def test_invalid_index_fails_before_any_upgrade_and_still_completes() -> None:
    calls: list[str] = []
    candidates = [candidate("a", "1", "2"), candidate("b", "1", "2")]
    store = RecordingPackageStore(items=[item.installed for item in candidates])

    with pytest.raises(IndexOutOfRangeError):
        _runner(store).run_all(candidates, [0, 5], on_complete=lambda: calls.append("done"))

    assert calls == ["done"]
    assert store.mutating_calls() == []


def test_negative_index_is_rejected_instead_of_wrapping() -> None:
    candidates = [candidate("a", "1", "2"), candidate("b", "1", "2")]
    store = RecordingPackageStore(items=[item.installed for item in candidates])

    with pytest.raises(IndexOutOfRangeError):
        _runner(store).run_all(candidates, [-1])

    assert store.mutating_calls() == []


def test_batch_summary_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    store = RecordingPackageStore()
    store.fail_sync.add("evil")
    candidates = [candidate("a", "1", "2"), candidate("evil", None, vc=True)]

    with caplog.at_level(logging.INFO, logger="services.upgrade.batch"):
        _runner(store).run_all(candidates, [0, 1])

    assert "1 failure(s): evil" in caplog.text
