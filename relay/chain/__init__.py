"""Chain collaborators: contract clients, signing, ABIs."""

from relay.chain.contracts import (
    BrandedTokenClient,
    UtilityChainClient,
    ValueChainClient,
    branded_token_factory,
    connect,
)
from relay.chain.errors import ChainError, TokenNotRegistered, TransactionFailed
from relay.chain.signer import OperatorAccount, TransactionSigner

__all__ = [
    "BrandedTokenClient",
    "ChainError",
    "OperatorAccount",
    "TokenNotRegistered",
    "TransactionFailed",
    "TransactionSigner",
    "UtilityChainClient",
    "ValueChainClient",
    "branded_token_factory",
    "connect",
]
