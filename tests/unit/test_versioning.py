from __future__ import annotations

import pytest

from domain.upgrades.versioning import compare_versions, is_upgrade, is_version_newer
from tests.unit.upgrade_test_utils import available, installed


@pytest.mark.parametrize(
    ("current", "candidate", "expected"),
    [
        ("1.0", "1.1", 1),
        ("1.10", "1.9", -1),
        ("1.2", "1.2.0", 0),
        ("1.2", "1.2.1", 1),
        ("2.0", "2.0rc1", -1),
    ],
)
def test_compare_versions_uses_release_ordering(current: str, candidate: str, expected: int) -> None:
    assert compare_versions(current, candidate) == expected


def test_compare_versions_falls_back_to_token_comparison_for_date_stamps() -> None:
    assert compare_versions("20240101.1200-snapshot", "20240102.0900-snapshot") == 1
    assert compare_versions("20240102.0900-snapshot", "20240101.1200-snapshot") == -1


def test_is_version_newer_rejects_equal_versions() -> None:
    assert is_version_newer("3.4.5", "3.4.6") is True
    assert is_version_newer("3.4.5", "3.4.5") is False


def test_is_upgrade_requires_newer_release() -> None:
    assert is_upgrade(installed("magit", "3.3"), available("magit", "3.4")) is True
    assert is_upgrade(installed("magit", "3.4"), available("magit", "3.3")) is False
    assert is_upgrade(installed("magit", "3.4"), None) is False


def test_is_upgrade_never_compares_vc_or_unversioned_packages() -> None:
    assert is_upgrade(installed("evil", "1.0", vc=True), available("evil", "9.9")) is False
    assert is_upgrade(installed("evil", None), available("evil", "9.9")) is False
