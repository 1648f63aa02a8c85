import json
from pathlib import Path

from app.config import (
    AppConfig,
    RefreshConfig,
    get_app_config,
    load_app_config,
    reset_app_config_cache,
)


def test_default_config_exposes_refresh_and_store_settings() -> None:
    reset_app_config_cache()
    config = load_app_config()
    assert isinstance(config, AppConfig)
    assert config.refresh == RefreshConfig(interval_days=7, strict=True)
    assert config.store.root == Path("~/.bumpkit/packages").expanduser()
    assert config.store.mirror is None
    assert config.excluded_packages == ()


def test_load_app_config_from_custom_path(tmp_path) -> None:
    custom_config = {
        "refresh": {"interval_days": 3, "strict": False},
        "store": {"root": str(tmp_path / "store"), "mirror": str(tmp_path / "mirror")},
        "excluded_packages": ["org", " org ", "", 5, "helm"],
    }
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps(custom_config), encoding="utf-8")

    config = load_app_config(config_path)

    assert config.refresh == RefreshConfig(interval_days=3, strict=False)
    assert config.store.root == tmp_path / "store"
    assert config.store.mirror == tmp_path / "mirror"
    assert config.excluded_packages == ("org", "helm")


def test_invalid_values_fall_back_to_defaults(tmp_path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps({"refresh": {"interval_days": -4, "strict": "yes"}, "store": {"root": 12}}),
        encoding="utf-8",
    )

    config = load_app_config(config_path)

    assert config.refresh == RefreshConfig(interval_days=7, strict=True)
    assert config.store.root == Path("~/.bumpkit/packages").expanduser()


def test_missing_or_malformed_file_uses_defaults(tmp_path) -> None:
    malformed = tmp_path / "broken.json"
    malformed.write_text("{", encoding="utf-8")

    assert load_app_config(malformed).refresh.interval_days == 7
    assert load_app_config(tmp_path / "missing.json").excluded_packages == ()


def test_get_app_config_is_cached() -> None:
    reset_app_config_cache()
    first = get_app_config()
    assert get_app_config() is first
    reset_app_config_cache()
    assert get_app_config() is not first
