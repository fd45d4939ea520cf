"""Entry point: Telegram bot + status API sharing one set of analyzers."""

import asyncio
import signal

from loguru import logger

from config.settings import settings
from src.api.registry import registry
from src.bot.bot import run_bot, stop_bot
from src.db.cache import create_cache
from src.db.redis import close_redis, redis_client
from src.parsers.dexscreener.client import DexScreenerClient
from src.parsers.geckoterminal.client import GeckoTerminalClient
from src.parsers.token_analysis import TokenAnalyzer
from src.parsers.transactions import SimulatedTransactionSource, TransactionStore
from src.parsers.wallet_pnl import WalletPnLAnalyzer
from src.utils.logger import setup_logger


async def wait_for_shutdown(
    tasks: list[asyncio.Task], shutdown_event: asyncio.Event
) -> list[BaseException]:
    """Block until shutdown is signalled or the surfaces stop running.

    The first failed surface ends the wait; failures are logged with their
    traceback and returned. Surfaces still running on return are cancelled.
    """
    stopper = asyncio.create_task(shutdown_event.wait(), name="shutdown")
    pending: set[asyncio.Task] = set(tasks)
    failures: list[BaseException] = []

    while pending and not failures and not stopper.done():
        done, pending = await asyncio.wait(
            pending | {stopper}, return_when=asyncio.FIRST_COMPLETED
        )
        pending.discard(stopper)
        for task in done:
            if task is stopper or task.cancelled():
                continue
            exc = task.exception()
            if exc is not None:
                logger.opt(exception=exc).error(f"[MAIN] {task.get_name()} failed: {exc}")
                failures.append(exc)
            else:
                logger.info(f"[MAIN] {task.get_name()} stopped")

    for task in (*pending, stopper):
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
    return failures


async def main() -> None:
    setup_logger(json_logs=settings.json_logs, level=settings.log_level)
    logger.info("Starting token analytics bot...")

    dexscreener = DexScreenerClient(
        max_rps=settings.dexscreener_max_rps, base_url=settings.dexscreener_base_url
    )
    geckoterminal = None
    if settings.enable_price_history:
        geckoterminal = GeckoTerminalClient(
            max_rps=settings.geckoterminal_max_rps, base_url=settings.geckoterminal_base_url
        )
    cache = await create_cache(settings.cache_backend)

    token_analyzer = TokenAnalyzer(
        dexscreener,
        geckoterminal,
        cache,
        cache_ttl=settings.analysis_cache_ttl_sec,
        suspicious_spread_pct=settings.suspicious_spread_pct,
    )
    transaction_store = TransactionStore()
    wallet_analyzer = WalletPnLAnalyzer(
        token_analyzer,
        SimulatedTransactionSource(
            transaction_store, simulate=settings.simulated_transactions
        ),
    )
    registry.token_analyzer = token_analyzer
    registry.wallet_analyzer = wallet_analyzer
    registry.transaction_store = transaction_store
    registry.redis = redis_client()

    # Graceful shutdown on SIGINT/SIGTERM
    loop = asyncio.get_running_loop()
    shutdown_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("Shutdown signal received")
        shutdown_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _signal_handler)

    tasks = [asyncio.create_task(run_bot(token_analyzer, wallet_analyzer), name="bot")]
    if settings.api_enabled:
        from src.api.server import run_api_server

        tasks.append(asyncio.create_task(run_api_server(), name="api"))

    await wait_for_shutdown(tasks, shutdown_event)

    await stop_bot()
    await dexscreener.close()
    if geckoterminal is not None:
        await geckoterminal.close()
    await close_redis()
    logger.info("Shutdown complete")


if __name__ == "__main__":
    asyncio.run(main())
