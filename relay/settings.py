"""Load relay settings from config/settings.yaml."""

from pathlib import Path
from typing import Any

import yaml

_DEFAULTS: dict[str, Any] = {
    "value_chain": {
        "rpc_url": "http://127.0.0.1:8545",
        "chain_id": None,
        "gas": 4_000_000,
        "gas_price": None,
        "receipt_timeout": 600,
        "contracts": {
            "open_st_value": None,
        },
    },
    "utility_chain": {
        "rpc_url": "http://127.0.0.1:9546",
        "chain_id": None,
        "gas": 4_000_000,
        "gas_price": None,
        "receipt_timeout": 600,
        "contracts": {
            "open_st_utility": None,
        },
    },
    "operator": {
        "address": None,
        "keystore_file": None,
        # Name looked up via relay.secrets (keyring first, then environment)
        "passphrase_secret": "RELAY_OPERATOR_PASSPHRASE",
    },
    "tokens": {
        # uuid of the utility chain's native token (ST Prime); no claim step runs for it
        "native_uuid": None,
    },
    "queue": {
        "delay_blocks": 6,
        "poll_interval": 5.0,
    },
    "source": {
        "event_name": "StakingIntentConfirmed",
        "poll_interval": 2.0,
        "from_block": "latest",
    },
    "ticker": {
        "poll_interval": 3.0,
    },
    "logging": {
        "file": "sandbox/logs/relay.log",
        "level": "INFO",
        "log_to_console": True,
        "max_bytes": 10485760,  # 10 MB
        "backup_count": 3,
    },
}

_cached: dict[str, Any] | None = None


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Merge overlay into base recursively. Mutates base."""
    for key, value in overlay.items():
        if value is None:
            continue
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def get_default_settings() -> dict[str, Any]:
    """Return a deep copy of default settings."""
    return _deep_copy_nested(_DEFAULTS)


def get_setting(settings: dict[str, Any], path: str, default: Any = None) -> Any:
    """Get a nested value by dot path (e.g. 'queue.delay_blocks')."""
    current: Any = settings
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]
    return current if current is not None else default


def reload_settings() -> None:
    """Clear the settings cache. Call after config files change."""
    global _cached
    _cached = None


def load_settings(config_dir: Path | None = None) -> dict[str, Any]:
    """Load settings from config/settings.yaml. Returns merged defaults + file values."""
    global _cached
    if _cached is not None:
        return _cached

    if config_dir is None:
        config_dir = Path(__file__).resolve().parent.parent / "config"
    path = config_dir / "settings.yaml"

    result = get_default_settings()

    if path.exists():
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                _deep_merge(result, data)
        except (yaml.YAMLError, OSError):
            pass

    _cached = result
    return result


def _deep_copy_nested(obj: Any) -> Any:
    """Return a deep copy of nested dicts/lists for defaults."""
    if isinstance(obj, dict):
        return {k: _deep_copy_nested(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_deep_copy_nested(x) for x in obj]
    return obj
