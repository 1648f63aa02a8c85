"""Helpers for comparing installed and available package versions."""

from __future__ import annotations

from packaging.version import InvalidVersion, Version

from domain.upgrades.models import AvailableItem, InstalledItem


__all__ = [
    "compare_versions",
    "is_upgrade",
    "is_version_newer",
]


def compare_versions(current_version: str, candidate: str) -> int:
    """Compare ``candidate`` against ``current_version``.

    Returns ``1`` when ``candidate`` is newer, ``-1`` when it is older and ``0``
    when the versions are equivalent.  Missing trailing components count as
    zero, so ``1.2`` and ``1.2.0`` are equal and ``1.2`` is older than
    ``1.2.1``.  Strings that are not valid PEP 440 versions are compared as
    dotted token sequences.
    """

    if candidate == current_version:
        return 0

    try:
        candidate_version = Version(candidate)
        current_version_parsed = Version(current_version)
    except InvalidVersion:
        return _token_compare(current_version, candidate)

    if candidate_version == current_version_parsed:
        return 0
    if candidate_version > current_version_parsed:
        return 1
    return -1


def is_version_newer(current_version: str, candidate: str) -> bool:
    """Return ``True`` if ``candidate`` is newer than ``current_version``."""

    return compare_versions(current_version, candidate) > 0


def is_upgrade(installed: InstalledItem, available: AvailableItem | None) -> bool:
    """Return ``True`` when ``available`` supersedes the ``installed`` package.

    VC-tracked and unversioned packages are never compared numerically.
    """

    if available is None:
        return False
    if installed.vc_tracked or not installed.version:
        return False
    return is_version_newer(installed.version, available.version)


def _token_compare(current_version: str, candidate: str) -> int:
    def tokenize(version: str) -> list[tuple[int, object]]:
        tokens: list[tuple[int, object]] = []
        for raw in version.strip().replace("-", ".").replace("+", ".").split("."):
            if not raw:
                continue
            if raw.isdigit():
                tokens.append((0, int(raw)))
            else:
                tokens.append((1, raw.lower()))
        return tokens

    current_tokens = tokenize(current_version)
    candidate_tokens = tokenize(candidate)
    length = max(len(current_tokens), len(candidate_tokens))
    for index in range(length):
        current_token = current_tokens[index] if index < len(current_tokens) else (0, 0)
        candidate_token = candidate_tokens[index] if index < len(candidate_tokens) else (0, 0)
        if candidate_token != current_token:
            return 1 if candidate_token > current_token else -1
    return 0
