"""Config validation: is the relay configured well enough to start?"""

from pathlib import Path

import yaml
from dotenv import dotenv_values
from web3 import Web3

from relay import secrets
from relay.settings import _deep_merge, get_default_settings, get_setting


class ConfigError(Exception):
    """Relay configuration is incomplete or invalid."""


def _read_settings(settings_file: Path) -> tuple[dict, str | None]:
    """Load and parse settings YAML. Returns (settings, None) or ({}, error_message)."""
    try:
        data = yaml.safe_load(settings_file.read_text(encoding="utf-8")) or {}
        return (data, None)
    except yaml.YAMLError as e:
        return ({}, f"settings.yaml parse error: {e}")


def _is_address(value: object) -> bool:
    return isinstance(value, str) and Web3.is_address(value)


def _is_bytes32(value: object) -> bool:
    if not isinstance(value, str) or not value.startswith("0x"):
        return False
    try:
        return len(Web3.to_bytes(hexstr=value)) == 32
    except ValueError:
        return False


def resolve_path(value: str, project_root: Path | None) -> Path:
    """Relative paths in settings are relative to the project root."""
    path = Path(value)
    if not path.is_absolute() and project_root is not None:
        path = project_root / path
    return path


def check_settings(
    settings: dict,
    env_vars: dict[str, str] | None = None,
    project_root: Path | None = None,
) -> tuple[bool, str]:
    """Validate merged settings. Returns (ok, reason)."""
    for chain in ("value_chain", "utility_chain"):
        if not get_setting(settings, f"{chain}.rpc_url"):
            return False, f"{chain}.rpc_url not set"
    for path in ("value_chain.contracts.open_st_value", "utility_chain.contracts.open_st_utility"):
        if not _is_address(get_setting(settings, path)):
            return False, f"{path} is not a valid address"

    if not _is_address(get_setting(settings, "operator.address")):
        return False, "operator.address is not a valid address"
    keystore = get_setting(settings, "operator.keystore_file")
    if not keystore or not resolve_path(keystore, project_root).exists():
        return False, f"operator keystore {keystore!r} not found"
    name = secrets.operator_passphrase_name(settings)
    env_vars = env_vars or {}
    if not (secrets.get_secret(name) or env_vars.get(name)):
        return False, f"operator passphrase {name} is not set"

    if not _is_bytes32(get_setting(settings, "tokens.native_uuid")):
        return False, "tokens.native_uuid must be a 0x-prefixed 32-byte hex value"
    delay = get_setting(settings, "queue.delay_blocks")
    if isinstance(delay, bool) or not isinstance(delay, int) or delay < 1:
        return False, f"queue.delay_blocks must be a positive integer, got {delay!r}"
    return True, "ok"


def is_configured(
    settings_path: Path | None = None,
    env_path: Path | None = None,
    project_root: Path | None = None,
) -> tuple[bool, str]:
    """Check whether config is sufficient to start the relay. Returns (ok, reason)."""
    root = project_root or Path.cwd()
    settings_file = settings_path or (root / "config" / "settings.yaml")
    env_file = env_path or (root / ".env")
    if not settings_file.exists():
        return False, "config/settings.yaml not found"
    data, err = _read_settings(settings_file)
    if err is not None:
        return False, err
    settings = _deep_merge(get_default_settings(), data if isinstance(data, dict) else {})
    env_vars = {k: v for k, v in dotenv_values(env_file).items() if v} if env_file.exists() else {}
    return check_settings(settings, env_vars, root)
