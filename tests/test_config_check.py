"""Tests for relay.config_check."""

from pathlib import Path

import pytest
import yaml

from relay.config_check import is_configured

OPERATOR = "0x" + "bb" * 20
NATIVE_UUID = "0x" + "ab" * 32


@pytest.fixture(autouse=True)
def _no_keyring(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("relay.secrets.keyring.get_password", lambda *a: None)
    monkeypatch.delenv("RELAY_OPERATOR_PASSPHRASE", raising=False)


def _valid_settings() -> dict:
    return {
        "value_chain": {"contracts": {"open_st_value": "0x" + "01" * 20}},
        "utility_chain": {"contracts": {"open_st_utility": "0x" + "02" * 20}},
        "operator": {"address": OPERATOR, "keystore_file": "keys/operator.json"},
        "tokens": {"native_uuid": NATIVE_UUID},
    }


def _write(tmp_path: Path, settings: dict, env: str | None = "RELAY_OPERATOR_PASSPHRASE=pw\n") -> None:
    (tmp_path / "config").mkdir(exist_ok=True)
    (tmp_path / "config" / "settings.yaml").write_text(yaml.safe_dump(settings))
    (tmp_path / "keys").mkdir(exist_ok=True)
    (tmp_path / "keys" / "operator.json").write_text("{}")
    if env is not None:
        (tmp_path / ".env").write_text(env)


def test_is_configured_missing_settings(tmp_path: Path) -> None:
    ok, reason = is_configured(project_root=tmp_path)
    assert ok is False
    assert "not found" in reason


def test_is_configured_malformed_yaml(tmp_path: Path) -> None:
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "settings.yaml").write_text("not: valid: yaml: [")
    ok, reason = is_configured(project_root=tmp_path)
    assert ok is False
    assert "parse error" in reason


def test_is_configured_ok(tmp_path: Path) -> None:
    _write(tmp_path, _valid_settings())
    ok, reason = is_configured(project_root=tmp_path)
    assert ok is True
    assert reason == "ok"


def test_passphrase_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write(tmp_path, _valid_settings(), env=None)
    monkeypatch.setenv("RELAY_OPERATOR_PASSPHRASE", "pw")
    ok, _ = is_configured(project_root=tmp_path)
    assert ok is True


def test_missing_passphrase(tmp_path: Path) -> None:
    _write(tmp_path, _valid_settings(), env=None)
    ok, reason = is_configured(project_root=tmp_path)
    assert ok is False
    assert "passphrase" in reason


def test_missing_keystore(tmp_path: Path) -> None:
    settings = _valid_settings()
    settings["operator"]["keystore_file"] = "keys/missing.json"
    _write(tmp_path, settings)
    ok, reason = is_configured(project_root=tmp_path)
    assert ok is False
    assert "keystore" in reason


def test_invalid_operator_address(tmp_path: Path) -> None:
    settings = _valid_settings()
    settings["operator"]["address"] = "0x1234"
    _write(tmp_path, settings)
    ok, reason = is_configured(project_root=tmp_path)
    assert ok is False
    assert "operator.address" in reason


def test_missing_contract_address(tmp_path: Path) -> None:
    settings = _valid_settings()
    del settings["utility_chain"]
    _write(tmp_path, settings)
    ok, reason = is_configured(project_root=tmp_path)
    assert ok is False
    assert "open_st_utility" in reason


@pytest.mark.parametrize("uuid", ["abab", "0x1234", None])
def test_invalid_native_uuid(tmp_path: Path, uuid) -> None:
    settings = _valid_settings()
    settings["tokens"]["native_uuid"] = uuid
    _write(tmp_path, settings)
    ok, reason = is_configured(project_root=tmp_path)
    assert ok is False
    assert "native_uuid" in reason


@pytest.mark.parametrize("delay", [0, -1, "6", True])
def test_invalid_delay_blocks(tmp_path: Path, delay) -> None:
    settings = _valid_settings()
    settings["queue"] = {"delay_blocks": delay}
    _write(tmp_path, settings)
    ok, reason = is_configured(project_root=tmp_path)
    assert ok is False
    assert "delay_blocks" in reason
