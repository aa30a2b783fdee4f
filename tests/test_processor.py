"""Tests for StakeAndMintProcessor: authorization, stage ordering, token branch."""

import pytest

from relay.chain.signer import OperatorAccount
from relay.events import QueuedEvent, StakingIntent
from relay.pipeline import ErrorCode, StakeAndMintProcessor, Success, TokenKind

from tests.fakes import (
    BENEFICIARY,
    BRANDED_UUID,
    NATIVE_UUID,
    OPERATOR,
    TOKEN_ADDRESS,
    ChainRecorder,
    FakeToken,
    FakeUtilityChain,
    FakeValueChain,
)

INTENT_HASH = "0x" + "11" * 32


def _queued(staker: str = OPERATOR, uuid: str = BRANDED_UUID) -> QueuedEvent:
    intent = StakingIntent(
        intent_hash=INTENT_HASH, staker=staker, beneficiary=BENEFICIARY, uuid=uuid
    )
    return QueuedEvent(identity_key=intent.identity_key, payload=intent, observed_height=1)


def _processor(recorder: ChainRecorder, operator: str = OPERATOR) -> StakeAndMintProcessor:
    return StakeAndMintProcessor(
        operator=OperatorAccount(address=operator, passphrase="secret"),
        value_chain=FakeValueChain(recorder),
        utility_chain=FakeUtilityChain(recorder),
        token_factory=lambda address: FakeToken(recorder, address),
        native_uuid=NATIVE_UUID,
    )


class TestAuthorization:
    @pytest.mark.asyncio
    async def test_foreign_staker_is_unauthorized_without_chain_calls(self) -> None:
        recorder = ChainRecorder()
        result = await _processor(recorder).process(_queued(staker="0x" + "aa" * 20))
        assert not result.ok
        assert result.code is ErrorCode.UNAUTHORIZED
        assert not result.code.retryable
        assert recorder.calls == []

    @pytest.mark.asyncio
    async def test_staker_match_ignores_case(self) -> None:
        recorder = ChainRecorder()
        result = await _processor(recorder).process(_queued(staker=OPERATOR.lower()))
        assert result.ok

    @pytest.mark.asyncio
    async def test_mixed_case_operator_still_rejects_other_staker(self) -> None:
        recorder = ChainRecorder()
        processor = _processor(recorder, operator=OPERATOR.upper().replace("0X", "0x"))
        result = await processor.process(_queued(staker="0xAaAa" + "aa" * 18))
        assert result.code is ErrorCode.UNAUTHORIZED
        assert recorder.calls == []


class TestStageOrdering:
    @pytest.mark.asyncio
    async def test_branded_runs_all_stages_in_order(self) -> None:
        recorder = ChainRecorder()
        result = await _processor(recorder).process(_queued())
        assert result == Success(INTENT_HASH, {"staking_intent_hash": INTENT_HASH})
        assert recorder.names == [
            "process_staking",
            "process_minting",
            "registered_token",
            "claim",
        ]

    @pytest.mark.asyncio
    async def test_stage1_failure_stops_pipeline(self) -> None:
        recorder = ChainRecorder(fail="process_staking")
        result = await _processor(recorder).process(_queued())
        assert result.code is ErrorCode.STAGE1_FAILED
        assert recorder.names == ["process_staking"]

    @pytest.mark.asyncio
    async def test_stage2_failure_skips_claim(self) -> None:
        recorder = ChainRecorder(fail="process_minting")
        result = await _processor(recorder).process(_queued())
        assert result.code is ErrorCode.STAGE2_FAILED
        assert "processMinting" in result.message
        assert recorder.names == ["process_staking", "process_minting"]

    @pytest.mark.asyncio
    async def test_lookup_failure_is_claim_failure(self) -> None:
        recorder = ChainRecorder(fail="registered_token")
        result = await _processor(recorder).process(_queued())
        assert result.code is ErrorCode.CLAIM_FAILED
        assert "claim" not in recorder.names

    @pytest.mark.asyncio
    async def test_claim_failure(self) -> None:
        recorder = ChainRecorder(fail="claim")
        result = await _processor(recorder).process(_queued())
        assert result.code is ErrorCode.CLAIM_FAILED
        assert result.identity_key == INTENT_HASH


class TestTokenBranch:
    @pytest.mark.asyncio
    async def test_native_uuid_skips_lookup_and_claim(self) -> None:
        recorder = ChainRecorder()
        result = await _processor(recorder).process(_queued(uuid=NATIVE_UUID.upper().replace("0X", "0x")))
        assert result.ok
        assert recorder.names == ["process_staking", "process_minting"]

    @pytest.mark.asyncio
    async def test_branded_claims_once_for_beneficiary_on_resolved_token(self) -> None:
        recorder = ChainRecorder()
        await _processor(recorder).process(_queued())
        claims = [c for c in recorder.calls if c[0] == "claim"]
        assert claims == [("claim", TOKEN_ADDRESS, BENEFICIARY)]

    def test_token_kind_resolution(self) -> None:
        assert TokenKind.resolve(NATIVE_UUID, NATIVE_UUID) is TokenKind.NATIVE
        assert TokenKind.resolve(BRANDED_UUID, NATIVE_UUID) is TokenKind.BRANDED
