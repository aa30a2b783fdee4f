"""Event ingestion: source adapter, delay queue, block ticker, worker."""

from relay.events.models import EntryState, QueuedEvent, StakingIntent
from relay.events.queue import DelayQueue
from relay.events.source import BlockTicker, EventSource
from relay.events.worker import QueueWorker

__all__ = [
    "BlockTicker",
    "DelayQueue",
    "EntryState",
    "EventSource",
    "QueueWorker",
    "QueuedEvent",
    "StakingIntent",
]
