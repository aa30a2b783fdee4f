"""Contract event source and block-height ticker.

EventSource installs a node-side log filter for one event of one contract and
polls it with eth_getFilterChanges, handing every log to exactly one callback
in the order the node returned them. Filter changes carry logs dropped by a
reorg with removed=true; those go to the changed callback. The
ticker periodically feeds the current block height to the delay queue.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable

from web3 import AsyncWeb3, Web3

from relay.events.queue import DelayQueue

logger = logging.getLogger(__name__)

DataCallback = Callable[[Any, int], Any]
ErrorCallback = Callable[[BaseException], Any]


async def _invoke(callback: Callable[..., Any], *args: Any) -> None:
    """Call a sync or async callback."""
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


async def _stop_task(task: asyncio.Task[None] | None) -> None:
    if task is None:
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


class EventSource:
    """Log-filter subscription to a single contract event."""

    def __init__(
        self,
        w3: AsyncWeb3,
        contract: Any,
        poll_interval: float = 2.0,
        from_block: int | str = "latest",
    ) -> None:
        self._w3 = w3
        self._contract = contract
        self._poll_interval = poll_interval
        self._from_block = from_block
        self._next_block: int | None = None
        self._filter_id: Any = None
        self._event_name: str | None = None
        self._topic: str | None = None
        self._event: Any = None
        self._on_data: DataCallback | None = None
        self._on_error: ErrorCallback | None = None
        self._on_changed: DataCallback | None = None
        self._task: asyncio.Task[None] | None = None
        self._stopped = False

    def subscribe(
        self,
        event_name: str,
        on_data: DataCallback,
        on_error: ErrorCallback,
        on_changed: DataCallback,
    ) -> None:
        """Attach callbacks for ``event_name``. Data callbacks get (decoded_event, head)."""
        abi = next(
            (
                item for item in self._contract.abi
                if item.get("type") == "event" and item.get("name") == event_name
            ),
            None,
        )
        if abi is None:
            raise ValueError(f"event {event_name!r} not found in contract ABI")
        event = getattr(self._contract.events, event_name)
        types = ",".join(inp["type"] for inp in abi["inputs"])
        self._topic = Web3.to_hex(Web3.keccak(text=f"{event_name}({types})"))
        self._event_name = event_name
        self._event = event()
        self._on_data = on_data
        self._on_error = on_error
        self._on_changed = on_changed
        logger.info("EventSource: subscribed to %s (%s)", event_name, self._topic)

    async def start(self) -> None:
        if self._event_name is None:
            raise RuntimeError("subscribe() must be called before start()")
        self._stopped = False
        self._task = asyncio.create_task(self._poll_loop())
        logger.info("EventSource poll loop started")

    async def stop(self) -> None:
        self._stopped = True
        await _stop_task(self._task)
        self._task = None
        if self._filter_id is not None:
            try:
                await self._w3.eth.uninstall_filter(self._filter_id)
            except Exception as e:
                logger.warning("EventSource: could not uninstall log filter: %s", e)
            self._filter_id = None
        logger.info("EventSource stopped")

    async def _poll_loop(self) -> None:
        while not self._stopped:
            await self.poll_once()
            try:
                await asyncio.sleep(self._poll_interval)
            except asyncio.CancelledError:
                break

    async def poll_once(self) -> int:
        """Fetch and dispatch new filter changes. Returns the number of logs dispatched.

        The first poll (and the first poll after a failure) installs a fresh
        filter starting at the block cursor and dispatches its backlog; later
        polls read only the changes since the previous poll.
        """
        try:
            head = await self._w3.eth.block_number
            if self._filter_id is None:
                if self._next_block is None:
                    self._next_block = (
                        head if self._from_block == "latest" else int(self._from_block)
                    )
                log_filter = await self._w3.eth.filter(
                    {
                        "address": self._contract.address,
                        "fromBlock": self._next_block,
                        "topics": [self._topic],
                    }
                )
                self._filter_id = log_filter.filter_id
                logs = await self._w3.eth.get_filter_logs(self._filter_id)
            else:
                logs = await self._w3.eth.get_filter_changes(self._filter_id)
        except Exception as e:
            # node filters expire when idle; reinstall from the cursor on the next poll
            self._filter_id = None
            await self._report_error(e)
            return 0

        self._next_block = max(self._next_block, head + 1)
        for log in logs:
            await self._dispatch(log, head)
        return len(logs)

    async def _dispatch(self, log: Any, head: int) -> None:
        try:
            decoded = self._event.process_log(log)
        except Exception as e:
            await self._report_error(e)
            return
        callback = self._on_changed if log.get("removed") else self._on_data
        try:
            await _invoke(callback, decoded, head)
        except Exception as e:
            logger.exception("EventSource: %s callback failed: %s", self._event_name, e)

    async def _report_error(self, error: BaseException) -> None:
        try:
            await _invoke(self._on_error, error)
        except Exception:
            logger.exception("EventSource: error callback failed")


class BlockTicker:
    """Feeds the current chain height into the delay queue on a timer."""

    def __init__(
        self,
        height: Callable[[], Awaitable[int]],
        queue: DelayQueue,
        on_due: Callable[[], None] | None = None,
        poll_interval: float = 3.0,
    ) -> None:
        self._height = height
        self._queue = queue
        self._on_due = on_due
        self._poll_interval = poll_interval
        self._task: asyncio.Task[None] | None = None
        self._stopped = False

    async def start(self) -> None:
        self._stopped = False
        self._task = asyncio.create_task(self._tick_loop())
        logger.info("BlockTicker started")

    async def stop(self) -> None:
        self._stopped = True
        await _stop_task(self._task)
        self._task = None
        logger.info("BlockTicker stopped")

    async def tick_once(self) -> int:
        """Read the height and tick the queue. Returns how many entries became due."""
        try:
            height = await self._height()
        except Exception as e:
            logger.warning("BlockTicker: could not read block height: %s", e)
            return 0
        due = await self._queue.tick(height)
        if due and self._on_due is not None:
            self._on_due()
        return due

    async def _tick_loop(self) -> None:
        while not self._stopped:
            await self.tick_once()
            try:
                await asyncio.sleep(self._poll_interval)
            except asyncio.CancelledError:
                break
