"""Stake-and-mint pipeline: processStaking -> processMinting -> claim.

Each step waits for the previous transaction to be mined. Any failure stops
the pipeline and is returned as an Error value; nothing is retried here.
"""

import logging
from enum import Enum
from typing import Any, Callable, Protocol

from relay.chain.signer import OperatorAccount
from relay.events.models import QueuedEvent
from relay.pipeline.results import Error, ErrorCode, PipelineResult, Success

logger = logging.getLogger(__name__)


class ValueChain(Protocol):
    async def process_staking(self, operator: OperatorAccount, intent_hash: str) -> Any: ...


class UtilityChain(Protocol):
    async def process_minting(self, operator: OperatorAccount, intent_hash: str) -> Any: ...

    async def registered_token(self, uuid: str) -> str: ...


class ClaimableToken(Protocol):
    async def claim(self, operator: OperatorAccount, beneficiary: str) -> Any: ...


class TokenKind(Enum):
    """Which claim path a staking intent takes."""

    NATIVE = "native"
    BRANDED = "branded"

    @classmethod
    def resolve(cls, uuid: str, native_uuid: str) -> "TokenKind":
        return cls.NATIVE if uuid.lower() == native_uuid.lower() else cls.BRANDED


class StakeAndMintProcessor:
    """Runs the follow-up transactions for one confirmed staking intent."""

    def __init__(
        self,
        operator: OperatorAccount,
        value_chain: ValueChain,
        utility_chain: UtilityChain,
        token_factory: Callable[[str], ClaimableToken],
        native_uuid: str,
    ) -> None:
        self._operator = operator
        self._value_chain = value_chain
        self._utility_chain = utility_chain
        self._token_factory = token_factory
        self._native_uuid = native_uuid

    async def process(self, queued: QueuedEvent) -> PipelineResult:
        """Run the pipeline for ``queued``. Always returns, never raises."""
        key = queued.identity_key
        intent = queued.payload
        intent_hash = intent.intent_hash

        # only act on stakes made by our own account
        if not self._operator.matches(intent.staker):
            logger.warning(
                "%s :: staker %s is not the operator account, skipping", intent_hash, intent.staker
            )
            return Error(key, ErrorCode.UNAUTHORIZED, "staker is not the operator account")

        logger.info("%s :: performing processStaking", intent_hash)
        try:
            await self._value_chain.process_staking(self._operator, intent_hash)
        except Exception as e:
            logger.exception("%s :: processStaking failed", intent_hash)
            return Error(key, ErrorCode.STAGE1_FAILED, f"processStaking failed: {e}")
        logger.info("%s :: performed processStaking", intent_hash)

        logger.info("%s :: performing processMinting", intent_hash)
        try:
            await self._utility_chain.process_minting(self._operator, intent_hash)
        except Exception as e:
            logger.exception("%s :: processMinting failed", intent_hash)
            return Error(key, ErrorCode.STAGE2_FAILED, f"processMinting failed: {e}")
        logger.info("%s :: performed processMinting", intent_hash)

        kind = TokenKind.resolve(intent.uuid, self._native_uuid)
        if kind is TokenKind.BRANDED:
            logger.info("%s :: performing claim for %s", intent_hash, intent.beneficiary)
            try:
                token_address = await self._utility_chain.registered_token(intent.uuid)
                token = self._token_factory(token_address)
                await token.claim(self._operator, intent.beneficiary)
            except Exception as e:
                logger.exception("%s :: claim failed", intent_hash)
                return Error(key, ErrorCode.CLAIM_FAILED, f"claim failed: {e}")
            logger.info("%s :: performed claim on %s", intent_hash, token_address)
        else:
            # ST Prime is released to the beneficiary by processMinting itself
            logger.info("%s :: native token, no claim needed", intent_hash)

        return Success(key, {"staking_intent_hash": intent_hash})
