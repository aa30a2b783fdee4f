"""Operator credential lookup via OS keyring with environment fallback."""

import logging
import os

import keyring
from keyring.errors import KeyringError

logger = logging.getLogger(__name__)
SERVICE_NAME = "openst-relay"


def _is_fail_backend() -> bool:
    """True when the active backend is the fail stub (no real keyring)."""
    try:
        from keyring.backends.fail import Keyring as FailKeyring

        backend = keyring.get_keyring()
        return isinstance(backend, FailKeyring)
    except Exception:
        return True


def is_keyring_available() -> bool:
    """True when a real OS keyring backend is active (not the fail stub)."""
    return not _is_fail_backend()


def get_secret(name: str) -> str | None:
    """Resolve secret: keyring -> os.environ. Sync, safe for init/scripts."""
    try:
        value = keyring.get_password(SERVICE_NAME, name)
        if value:
            return value
    except KeyringError:
        logger.debug("keyring lookup failed for %s, falling back to env", name)
    return os.environ.get(name)


def operator_passphrase_name(settings: dict) -> str:
    """Secret name holding the operator keystore passphrase."""
    operator = settings.get("operator") or {}
    return operator.get("passphrase_secret") or "RELAY_OPERATOR_PASSPHRASE"


def get_operator_passphrase(settings: dict) -> str | None:
    """Resolve the passphrase that unlocks the operator keystore."""
    name = operator_passphrase_name(settings)
    value = get_secret(name)
    if value is None:
        source = "keyring or environment" if is_keyring_available() else "environment"
        logger.warning("operator passphrase %s not found in %s", name, source)
    return value
