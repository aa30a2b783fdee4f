"""In-memory delay queue: hold observed events until enough blocks confirm them.

One live entry per identity key. All state changes go through one
asyncio.Lock so that ingestion (enqueue) and draining (claim/complete)
never interleave inside an operation.
"""

import asyncio
import logging
from collections import Counter, OrderedDict

from relay.events.models import EntryState, QueuedEvent, StakingIntent
from relay.pipeline.results import PipelineResult

logger = logging.getLogger(__name__)


class DelayQueue:
    """Confirmation-delayed queue of StakingIntent events, keyed by intent hash."""

    def __init__(self, delay_blocks: int) -> None:
        if isinstance(delay_blocks, bool) or not isinstance(delay_blocks, int) or delay_blocks < 1:
            raise ValueError(f"delay_blocks must be a positive integer, got {delay_blocks!r}")
        self._delay_blocks = delay_blocks
        self._lock = asyncio.Lock()
        # insertion order == scan and claim order
        self._entries: OrderedDict[str, QueuedEvent] = OrderedDict()
        self._height: int | None = None

    @property
    def delay_blocks(self) -> int:
        return self._delay_blocks

    @property
    def current_height(self) -> int | None:
        """Latest height seen by tick(), or None before the first tick."""
        return self._height

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, identity_key: str) -> QueuedEvent | None:
        return self._entries.get(identity_key.lower())

    def snapshot(self) -> dict[str, int]:
        """Count of live entries per state."""
        counts = Counter(entry.state.value for entry in self._entries.values())
        return dict(counts)

    async def enqueue(self, event: StakingIntent, observed_height: int) -> None:
        """Insert a PENDING entry unless one is already live for the same key."""
        key = event.identity_key
        async with self._lock:
            existing = self._entries.get(key)
            if existing is not None and existing.state.is_live:
                logger.debug(
                    "DelayQueue: %s already queued (%s), ignoring", key, existing.state.value
                )
                return
            self._entries[key] = QueuedEvent(
                identity_key=key,
                payload=event,
                observed_height=observed_height,
            )
        logger.info("DelayQueue: queued %s at height %d", key, observed_height)

    async def tick(self, current_height: int) -> int:
        """Promote confirmed PENDING entries to DUE. Returns how many were promoted."""
        promoted = 0
        async with self._lock:
            if self._height is None or current_height > self._height:
                self._height = current_height
            for entry in self._entries.values():
                if entry.state is not EntryState.PENDING:
                    continue
                if entry.confirmations(current_height) >= self._delay_blocks:
                    entry.state = EntryState.DUE
                    promoted += 1
        if promoted:
            logger.debug("DelayQueue: %d entries due at height %d", promoted, current_height)
        return promoted

    async def claim(self) -> QueuedEvent | None:
        """Take the oldest DUE entry and mark it PROCESSING."""
        async with self._lock:
            for entry in self._entries.values():
                if entry.state is not EntryState.DUE:
                    continue
                # a lower height reported later must not release an entry early
                if (
                    self._height is None
                    or entry.confirmations(self._height) < self._delay_blocks
                ):
                    continue
                entry.state = EntryState.PROCESSING
                return entry
        return None

    async def complete(self, identity_key: str, result: PipelineResult) -> None:
        """Finish a PROCESSING entry as DONE or FAILED and drop it from the index."""
        key = identity_key.lower()
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry.state is not EntryState.PROCESSING:
                logger.warning(
                    "DelayQueue: complete() for %s which is not processing, ignoring", key
                )
                return
            entry.state = EntryState.DONE if result.ok else EntryState.FAILED
            del self._entries[key]
        logger.debug("DelayQueue: %s finished as %s", key, entry.state.value)
