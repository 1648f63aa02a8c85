from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_project_root_on_path() -> None:
    """Guarantee the repository root is discoverable for absolute imports."""

    root = Path(__file__).resolve().parent.parent
    root_str = str(root)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)


_ensure_project_root_on_path()


@pytest.fixture(autouse=True)
def _isolated_user_files(monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory):
    """Keep preference, log and store lookups away from real user data."""

    from shared import logging_config

    user_dir = tmp_path_factory.mktemp("bumpkit-user")
    monkeypatch.setenv("BUMPKIT_PREFERENCES_PATH", str(user_dir / "preferences.json"))
    monkeypatch.setenv("BUMPKIT_LOG_DIR", str(user_dir / "logs"))
    monkeypatch.delenv("BUMPKIT_STORE_ROOT", raising=False)
    monkeypatch.delenv("BUMPKIT_MIRROR", raising=False)
    logging_config._reset_for_tests()

    yield

    logging_config._reset_for_tests()
