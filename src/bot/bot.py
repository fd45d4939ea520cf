"""Telegram bot lifecycle, aiogram 3.x polling mode.

Started as an asyncio task from ``src.main``. Only runs if
telegram_bot_token is configured.
"""

from loguru import logger

from src.parsers.token_analysis import TokenAnalyzer
from src.parsers.wallet_pnl import WalletPnLAnalyzer

_bot_instance = None
_dp_instance = None


def get_bot():
    """Get or create the aiogram Bot singleton."""
    global _bot_instance
    if _bot_instance is None:
        from aiogram import Bot

        from config.settings import settings

        if not settings.telegram_bot_token:
            raise RuntimeError("TELEGRAM_BOT_TOKEN not configured")
        _bot_instance = Bot(token=settings.telegram_bot_token)
    return _bot_instance


def get_dispatcher(token_analyzer: TokenAnalyzer, wallet_analyzer: WalletPnLAnalyzer):
    """Get or create the Dispatcher with handlers and analyzers registered."""
    global _dp_instance
    if _dp_instance is None:
        from aiogram import Dispatcher

        from src.bot.handlers import router

        _dp_instance = Dispatcher(
            token_analyzer=token_analyzer,
            wallet_analyzer=wallet_analyzer,
        )
        _dp_instance.include_router(router)
    return _dp_instance


async def run_bot(token_analyzer: TokenAnalyzer, wallet_analyzer: WalletPnLAnalyzer) -> None:
    """Start the Telegram bot in polling mode; runs until cancelled."""
    try:
        bot = get_bot()
        dp = get_dispatcher(token_analyzer, wallet_analyzer)
        logger.info("[BOT] Starting Telegram bot (polling mode)")
        await dp.start_polling(bot, close_bot_session=False)
    except RuntimeError as e:
        logger.warning(f"[BOT] Cannot start: {e}")


async def stop_bot() -> None:
    """Gracefully stop the bot."""
    global _bot_instance
    if _bot_instance:
        await _bot_instance.session.close()
        _bot_instance = None
