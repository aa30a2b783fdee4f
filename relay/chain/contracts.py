"""Web3 clients for the OpenST value/utility contracts and branded tokens."""

import logging
from typing import Callable

from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from relay.chain.abis import BRANDED_TOKEN_ABI, OPEN_ST_UTILITY_ABI, OPEN_ST_VALUE_ABI
from relay.chain.errors import TokenNotRegistered
from relay.chain.signer import OperatorAccount, TransactionSigner

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def connect(rpc_url: str) -> AsyncWeb3:
    """Async web3 instance over HTTP JSON-RPC."""
    return AsyncWeb3(AsyncHTTPProvider(rpc_url))


def _bytes32(hex_value: str) -> bytes:
    return Web3.to_bytes(hexstr=hex_value)


class ValueChainClient:
    """OpenSTValue on the value chain."""

    def __init__(self, w3: AsyncWeb3, signer: TransactionSigner, open_st_value: str) -> None:
        self._signer = signer
        self._contract = w3.eth.contract(
            address=Web3.to_checksum_address(open_st_value), abi=OPEN_ST_VALUE_ABI
        )

    async def process_staking(self, operator: OperatorAccount, intent_hash: str) -> dict:
        call = self._contract.functions.processStaking(_bytes32(intent_hash))
        return await self._signer.transact(operator, call, "processStaking")


class UtilityChainClient:
    """OpenSTUtility on the utility chain; also the source of block height."""

    def __init__(self, w3: AsyncWeb3, signer: TransactionSigner, open_st_utility: str) -> None:
        self._w3 = w3
        self._signer = signer
        self._contract = w3.eth.contract(
            address=Web3.to_checksum_address(open_st_utility), abi=OPEN_ST_UTILITY_ABI
        )

    @property
    def contract(self):
        return self._contract

    async def block_number(self) -> int:
        return await self._w3.eth.block_number

    async def process_minting(self, operator: OperatorAccount, intent_hash: str) -> dict:
        call = self._contract.functions.processMinting(_bytes32(intent_hash))
        return await self._signer.transact(operator, call, "processMinting")

    async def registered_token(self, uuid: str) -> str:
        """Address of the token contract registered for ``uuid``."""
        token, _registrar = await self._contract.functions.registeredTokens(_bytes32(uuid)).call()
        if not token or token.lower() == ZERO_ADDRESS:
            raise TokenNotRegistered(f"no token registered for uuid {uuid}")
        logger.debug("uuid %s is registered to token %s", uuid, token)
        return Web3.to_checksum_address(token)


class BrandedTokenClient:
    """A branded token contract on the utility chain."""

    def __init__(self, w3: AsyncWeb3, signer: TransactionSigner, address: str) -> None:
        self.address = Web3.to_checksum_address(address)
        self._signer = signer
        self._contract = w3.eth.contract(address=self.address, abi=BRANDED_TOKEN_ABI)

    async def claim(self, operator: OperatorAccount, beneficiary: str) -> dict:
        call = self._contract.functions.claim(Web3.to_checksum_address(beneficiary))
        return await self._signer.transact(operator, call, "claim")


def branded_token_factory(
    w3: AsyncWeb3, signer: TransactionSigner
) -> Callable[[str], BrandedTokenClient]:
    """Factory the processor uses to get a handle on a resolved token address."""

    def _factory(address: str) -> BrandedTokenClient:
        return BrandedTokenClient(w3, signer, address)

    return _factory
