"""Constants shared across the upgrade service modules."""

from __future__ import annotations

STORE_ROOT_ENV = "BUMPKIT_STORE_ROOT"
MIRROR_ENV = "BUMPKIT_MIRROR"

INSTALLED_DIRNAME = "installed"
ARCHIVE_DIRNAME = "archive"
CATALOG_FILENAME = "catalog.json"
SELECTED_FILENAME = "selected.json"
VC_MARKER = ".git"
VC_VERSION_FILENAME = "VERSION"
STAGING_SUFFIX = ".partial"

GIT_SYNC_COMMAND = ("git", "pull", "--ff-only")
GIT_SYNC_TIMEOUT_SECONDS = 300

