"""Single worker that drains due entries from the delay queue.

All relay transactions are signed by one account, so pipelines run strictly
one after another. A pipeline stuck waiting on a receipt blocks the worker
until the underlying call returns or times out.
"""

import asyncio
import logging
from typing import Protocol

from relay.events.models import QueuedEvent
from relay.events.queue import DelayQueue
from relay.pipeline.reporter import ResultReporter
from relay.pipeline.results import Error, ErrorCode, PipelineResult

logger = logging.getLogger(__name__)


class Processor(Protocol):
    async def process(self, queued: QueuedEvent) -> PipelineResult: ...


class QueueWorker:
    """Claim -> process -> complete -> report, one entry at a time."""

    def __init__(
        self,
        queue: DelayQueue,
        processor: Processor,
        reporter: ResultReporter,
        poll_interval: float = 5.0,
    ) -> None:
        self._queue = queue
        self._processor = processor
        self._reporter = reporter
        self._poll_interval = poll_interval
        self._wake = asyncio.Event()
        self._drain_lock = asyncio.Lock()
        self._task: asyncio.Task[None] | None = None
        self._stopped = False

    def wake(self) -> None:
        """Signal that entries may have become due."""
        self._wake.set()

    async def start(self) -> None:
        self._stopped = False
        self._task = asyncio.create_task(self._drain_loop())
        logger.info("QueueWorker started")

    async def stop(self) -> None:
        """Stop the loop. A pipeline in flight is cancelled at its next await."""
        self._stopped = True
        self._wake.set()
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("QueueWorker stopped")

    async def _drain_loop(self) -> None:
        while not self._stopped:
            try:
                await asyncio.wait_for(self._wake.wait(), timeout=self._poll_interval)
            except asyncio.TimeoutError:
                pass
            self._wake.clear()
            if self._stopped:
                break
            await self.drain()

    async def drain(self) -> int:
        """Process due entries until none is left. Returns how many ran."""
        processed = 0
        async with self._drain_lock:
            while not self._stopped:
                entry = await self._queue.claim()
                if entry is None:
                    break
                result = await self._run(entry)
                await self._queue.complete(entry.identity_key, result)
                self._reporter.report(result)
                processed += 1
        return processed

    async def _run(self, entry: QueuedEvent) -> PipelineResult:
        try:
            return await self._processor.process(entry)
        except Exception as e:
            # processor failures are values; reaching here means the failing stage is unknown
            logger.exception("QueueWorker: pipeline crashed for %s: %s", entry.identity_key, e)
            return Error(
                entry.identity_key,
                ErrorCode.STAGE1_FAILED,
                f"pipeline crashed at an unknown stage: {e}",
            )
