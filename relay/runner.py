"""Entry point for the relay process: wire chains, queue, worker and event source."""

import asyncio
import logging
import signal
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from relay import secrets
from relay.chain import (
    OperatorAccount,
    TransactionSigner,
    UtilityChainClient,
    ValueChainClient,
    branded_token_factory,
    connect,
)
from relay.config_check import ConfigError, check_settings, resolve_path
from relay.events import BlockTicker, DelayQueue, EventSource, QueueWorker, StakingIntent
from relay.logging_config import setup_logging
from relay.pipeline import ResultReporter, StakeAndMintProcessor
from relay.settings import get_setting, load_settings

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


@dataclass
class Relay:
    """Running components, in start order."""

    queue: DelayQueue
    worker: QueueWorker
    ticker: BlockTicker
    source: EventSource
    reporter: ResultReporter

    async def start(self) -> None:
        await self.worker.start()
        await self.ticker.start()
        await self.source.start()

    async def stop(self) -> None:
        await self.source.stop()
        await self.ticker.stop()
        await self.worker.stop()
        logger.info("Relay stopped; queue state at shutdown: %s", self.queue.snapshot())


def _build_operator(settings: dict) -> OperatorAccount:
    passphrase = secrets.get_operator_passphrase(settings)
    if passphrase is None:
        raise ConfigError("operator passphrase is not set")
    return OperatorAccount(
        address=get_setting(settings, "operator.address"),
        passphrase=passphrase,
        keystore_path=resolve_path(get_setting(settings, "operator.keystore_file"), _PROJECT_ROOT),
    )


def _build_signer(w3: Any, chain_cfg: dict) -> TransactionSigner:
    return TransactionSigner(
        w3,
        chain_id=chain_cfg.get("chain_id"),
        gas=chain_cfg.get("gas"),
        gas_price=chain_cfg.get("gas_price"),
        receipt_timeout=chain_cfg.get("receipt_timeout", 600),
    )


def build_relay(settings: dict) -> Relay:
    """Construct every component from settings. Nothing is started."""
    ok, reason = check_settings(settings, project_root=_PROJECT_ROOT)
    if not ok:
        raise ConfigError(reason)

    value_cfg = settings["value_chain"]
    utility_cfg = settings["utility_chain"]
    value_w3 = connect(value_cfg["rpc_url"])
    utility_w3 = connect(utility_cfg["rpc_url"])
    value_signer = _build_signer(value_w3, value_cfg)
    utility_signer = _build_signer(utility_w3, utility_cfg)

    value_chain = ValueChainClient(
        value_w3, value_signer, value_cfg["contracts"]["open_st_value"]
    )
    utility_chain = UtilityChainClient(
        utility_w3, utility_signer, utility_cfg["contracts"]["open_st_utility"]
    )
    processor = StakeAndMintProcessor(
        operator=_build_operator(settings),
        value_chain=value_chain,
        utility_chain=utility_chain,
        token_factory=branded_token_factory(utility_w3, utility_signer),
        native_uuid=get_setting(settings, "tokens.native_uuid"),
    )

    queue = DelayQueue(get_setting(settings, "queue.delay_blocks", 6))
    reporter = ResultReporter()
    worker = QueueWorker(
        queue, processor, reporter, poll_interval=get_setting(settings, "queue.poll_interval", 5.0)
    )
    ticker = BlockTicker(
        utility_chain.block_number,
        queue,
        on_due=worker.wake,
        poll_interval=get_setting(settings, "ticker.poll_interval", 3.0),
    )
    source = EventSource(
        utility_w3,
        utility_chain.contract,
        poll_interval=get_setting(settings, "source.poll_interval", 2.0),
        from_block=get_setting(settings, "source.from_block", "latest"),
    )

    async def on_event(event: Any, head: int) -> None:
        await queue.enqueue(StakingIntent.from_event(event), head)

    async def on_changed(event: Any, head: int) -> None:
        logger.warning(
            "Possible reorg touching staking intent in tx %s; re-queueing",
            event.get("transactionHash"),
        )
        await on_event(event, head)

    def on_error(error: BaseException) -> None:
        logger.error("Event subscription error: %s", error)

    try:
        source.subscribe(
            get_setting(settings, "source.event_name", "StakingIntentConfirmed"),
            on_data=on_event,
            on_error=on_error,
            on_changed=on_changed,
        )
    except ValueError as e:
        raise ConfigError(f"source.event_name: {e}") from e
    return Relay(queue=queue, worker=worker, ticker=ticker, source=source, reporter=reporter)


async def main_async() -> None:
    """Bootstrap: settings -> logging -> build -> start -> wait for shutdown."""
    settings = load_settings()
    setup_logging(_PROJECT_ROOT, settings)
    relay = build_relay(settings)
    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, shutdown_event.set)
        except NotImplementedError:
            pass  # Windows: KeyboardInterrupt handles Ctrl+C
    await relay.start()
    logger.info(
        "Stake and mint relay started (delay %d blocks)", relay.queue.delay_blocks
    )
    try:
        await shutdown_event.wait()
    except asyncio.CancelledError:
        pass
    finally:
        await relay.stop()


def main() -> None:
    """Synchronous entry for the relay process."""
    load_dotenv(_PROJECT_ROOT / ".env")
    try:
        asyncio.run(main_async())
    except KeyboardInterrupt:
        pass


__all__ = ["Relay", "build_relay", "main"]
