from __future__ import annotations

from importlib import resources

from app.version import get_app_version


def _reset_cache() -> None:
    get_app_version.cache_clear()  # type: ignore[attr-defined]


def test_get_app_version_prefers_environment(monkeypatch) -> None:
    monkeypatch.setenv("BUMPKIT_APP_VERSION", "v1.2.3")
    _reset_cache()

    try:
        assert get_app_version() == "1.2.3"
    finally:
        _reset_cache()


def test_get_app_version_falls_back_to_version_file(monkeypatch) -> None:
    monkeypatch.delenv("BUMPKIT_APP_VERSION", raising=False)
    _reset_cache()

    version_file = resources.files("app").joinpath("VERSION")
    expected = version_file.read_text(encoding="utf-8").strip()
    assert expected
    try:
        assert get_app_version() == expected
    finally:
        _reset_cache()
