"""Operator credentials and local transaction signing."""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncWeb3, Web3

from relay.chain.errors import TransactionFailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperatorAccount:
    """The single account that signs every relay transaction."""

    address: str
    passphrase: str = field(repr=False)
    keystore_path: Path | None = None

    def matches(self, address: str) -> bool:
        """Case-insensitive address comparison."""
        return str(address).lower() == self.address.lower()


class TransactionSigner:
    """Sign and submit contract transactions on one chain for the operator.

    Submissions are serialized per signer so nonces stay sequential even if
    more than one caller shares it.
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        chain_id: int | None = None,
        gas: int | None = None,
        gas_price: int | None = None,
        receipt_timeout: float = 600,
    ) -> None:
        self._w3 = w3
        self._chain_id = chain_id
        self._gas = gas
        self._gas_price = gas_price
        self._receipt_timeout = receipt_timeout
        self._lock = asyncio.Lock()
        self._accounts: dict[str, LocalAccount] = {}

    def _local_account(self, operator: OperatorAccount) -> LocalAccount:
        key = operator.address.lower()
        account = self._accounts.get(key)
        if account is None:
            if operator.keystore_path is None:
                raise ValueError(f"no keystore configured for {operator.address}")
            keyfile = json.loads(Path(operator.keystore_path).read_text(encoding="utf-8"))
            account = Account.from_key(Account.decrypt(keyfile, operator.passphrase))
            if account.address.lower() != key:
                raise ValueError(
                    f"keystore {operator.keystore_path} holds {account.address}, "
                    f"expected {operator.address}"
                )
            self._accounts[key] = account
        return account

    def _tx_params(self, sender: str, nonce: int) -> dict[str, Any]:
        params: dict[str, Any] = {"from": sender, "nonce": nonce}
        if self._chain_id is not None:
            params["chainId"] = self._chain_id
        if self._gas is not None:
            params["gas"] = self._gas
        if self._gas_price is not None:
            params["gasPrice"] = self._gas_price
        return params

    async def transact(self, operator: OperatorAccount, call: Any, method: str) -> dict:
        """Build, sign and send ``call``; wait for the receipt.

        ``call`` is a bound contract function (``contract.functions.x(...)``).
        Raises TransactionFailed when the receipt reports a revert.
        """
        account = await asyncio.to_thread(self._local_account, operator)
        async with self._lock:
            nonce = await self._w3.eth.get_transaction_count(account.address, "pending")
            tx = await call.build_transaction(self._tx_params(account.address, nonce))
            signed = account.sign_transaction(tx)
            tx_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
        tx_hex = Web3.to_hex(tx_hash)
        logger.info("%s submitted: %s (nonce %d)", method, tx_hex, nonce)
        receipt = await self._w3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=self._receipt_timeout
        )
        if receipt.get("status") != 1:
            raise TransactionFailed(tx_hex, method)
        logger.info("%s mined in block %s: %s", method, receipt.get("blockNumber"), tx_hex)
        return dict(receipt)
