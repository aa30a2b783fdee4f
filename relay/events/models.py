"""Event and queue entry models for the delay queue."""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

__all__ = ["EntryState", "QueuedEvent", "StakingIntent"]


def _hex(value: Any) -> str:
    """Normalize bytes / HexBytes / str to a 0x-prefixed hex string."""
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    text = str(value)
    return text if text.startswith(("0x", "0X")) else "0x" + text


class EntryState(str, Enum):
    """Lifecycle of a queue entry."""

    PENDING = "pending"
    DUE = "due"
    PROCESSING = "processing"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_live(self) -> bool:
        return self in (EntryState.PENDING, EntryState.DUE, EntryState.PROCESSING)


@dataclass(frozen=True)
class StakingIntent:
    """Immutable payload of a StakingIntentConfirmed event."""

    intent_hash: str
    staker: str
    beneficiary: str
    uuid: str
    block_number: int | None = None
    transaction_hash: str | None = None

    @property
    def identity_key(self) -> str:
        """Deduplication key: the intent hash, lower-cased."""
        return self.intent_hash.lower()

    @classmethod
    def from_event(cls, event: Mapping[str, Any]) -> "StakingIntent":
        """Build from a decoded web3 event (AttributeDict with ``args``)."""
        args = event["args"]
        tx_hash = event.get("transactionHash")
        return cls(
            intent_hash=_hex(args["_stakingIntentHash"]),
            staker=str(args["_staker"]),
            beneficiary=str(args["_beneficiary"]),
            uuid=_hex(args["_uuid"]),
            block_number=event.get("blockNumber"),
            transaction_hash=_hex(tx_hash) if tx_hash is not None else None,
        )


@dataclass
class QueuedEvent:
    """Delay queue entry. Mutated only by DelayQueue under its lock."""

    identity_key: str
    payload: StakingIntent
    observed_height: int
    state: EntryState = EntryState.PENDING
    enqueued_at: float = field(default_factory=time.time)

    def confirmations(self, current_height: int) -> int:
        return current_height - self.observed_height
