"""Exceptions raised by the upgrade domain."""

from __future__ import annotations

from enum import Enum


class UnsupportedModeError(RuntimeError):
    """Raised when VC-tracked packages are requested without VC support."""


class IndexOutOfRangeError(IndexError):
    """Raised when a selection index falls outside the candidate list."""


class InvalidScheduleError(ValueError):
    """Raised when a time-of-day schedule cannot be parsed."""


class PackageStoreError(RuntimeError):
    """Raised by package stores when an install, delete or sync fails."""


class UpgradeErrorKind(str, Enum):
    """Failure categories reported for a single package upgrade."""

    INSTALL_FAILED = "install_failed"
    VC_SYNC_FAILED = "vc_sync_failed"
    REMOVE_FAILED = "remove_failed"


class UpgradeError(RuntimeError):
    """Describe why upgrading one package failed."""

    def __init__(self, kind: UpgradeErrorKind, name: str, reason: str = "") -> None:
        self.kind = kind
        self.name = name
        self.reason = reason
        message = f"{name}: {kind.value}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


__all__ = [
    "IndexOutOfRangeError",
    "InvalidScheduleError",
    "PackageStoreError",
    "UnsupportedModeError",
    "UpgradeError",
    "UpgradeErrorKind",
]
