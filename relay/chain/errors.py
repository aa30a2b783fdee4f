"""Exceptions raised by chain collaborators."""


class ChainError(Exception):
    """A chain call could not be completed."""


class TransactionFailed(ChainError):
    """Transaction was mined but reverted (receipt status 0)."""

    def __init__(self, tx_hash: str, method: str) -> None:
        super().__init__(f"{method} reverted in transaction {tx_hash}")
        self.tx_hash = tx_hash
        self.method = method


class TokenNotRegistered(ChainError):
    """No token contract is registered on the utility chain for a uuid."""
