"""Tests for relay.settings: defaults, YAML overlay, dot-path lookup."""

from pathlib import Path

import pytest
import yaml

from relay import settings as settings_mod
from relay.settings import get_default_settings, get_setting, load_settings, reload_settings


@pytest.fixture(autouse=True)
def _clear_cache():
    reload_settings()
    yield
    reload_settings()


def test_defaults_when_file_missing(tmp_path: Path) -> None:
    settings = load_settings(tmp_path)
    assert get_setting(settings, "queue.delay_blocks") == 6
    assert get_setting(settings, "source.event_name") == "StakingIntentConfirmed"


def test_yaml_overlays_defaults(tmp_path: Path) -> None:
    (tmp_path / "settings.yaml").write_text(
        yaml.safe_dump({"queue": {"delay_blocks": 12}, "tokens": {"native_uuid": "0x01"}})
    )
    settings = load_settings(tmp_path)
    assert settings["queue"]["delay_blocks"] == 12
    assert settings["queue"]["poll_interval"] == 5.0
    assert settings["tokens"]["native_uuid"] == "0x01"


def test_invalid_yaml_falls_back_to_defaults(tmp_path: Path) -> None:
    (tmp_path / "settings.yaml").write_text("queue: [unclosed")
    settings = load_settings(tmp_path)
    assert settings["queue"]["delay_blocks"] == 6


def test_settings_are_cached(tmp_path: Path) -> None:
    first = load_settings(tmp_path)
    assert load_settings(tmp_path / "elsewhere") is first
    assert settings_mod._cached is first


def test_get_setting_default_for_missing_or_null() -> None:
    settings = get_default_settings()
    assert get_setting(settings, "nope.nothing", 3) == 3
    assert get_setting(settings, "operator.address", "unset") == "unset"


def test_default_settings_are_copies() -> None:
    a = get_default_settings()
    a["queue"]["delay_blocks"] = 99
    assert get_default_settings()["queue"]["delay_blocks"] == 6
