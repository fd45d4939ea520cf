"""Telegram bot command handlers.

``token_analyzer`` and ``wallet_analyzer`` arrive through the dispatcher's
workflow data (see ``src.bot.bot.get_dispatcher``).
"""

import asyncio
import html

from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message
from loguru import logger

from src.bot.formatters import (
    format_help,
    format_status,
    format_token_analysis,
    format_wallet_report,
)
from src.bot.validators import is_valid_address
from src.parsers.market_constants import SUPPORTED_CHAINS
from src.parsers.token_analysis import TokenAnalyzer
from src.parsers.wallet_pnl import WalletPnLAnalyzer

router = Router()

MAX_ADDRESS_LEN = 64

WETH_ETHEREUM = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
WSOL_SOLANA = "So11111111111111111111111111111111111111112"

ERROR_REPLY = "❌ Something went wrong while analyzing. Details have been logged."


def _args(message: Message) -> list[str]:
    return (message.text or "").split()[1:]


@router.message(Command("start", "help"))
async def cmd_help(message: Message) -> None:
    await message.answer(format_help(), parse_mode="HTML")


@router.message(Command("analyze"))
async def cmd_analyze(message: Message, token_analyzer: TokenAnalyzer) -> None:
    """/analyze <token> [chain]"""
    args = _args(message)
    if not args:
        await message.answer("Usage: /analyze &lt;token&gt; [chain]", parse_mode="HTML")
        return

    token = args[0][:MAX_ADDRESS_LEN]
    if not is_valid_address(token):
        await message.answer("❌ Invalid token address format.")
        return

    chain = args[1].lower() if len(args) > 1 else None
    if chain is not None and chain not in SUPPORTED_CHAINS:
        await message.answer(
            f"❌ Unsupported chain. Use one of: {', '.join(SUPPORTED_CHAINS)}"
        )
        return

    try:
        chain = chain or await token_analyzer.detect_chain(token)
        if chain is None:
            await message.answer("❌ Token not found on any supported chain.")
            return

        analysis = await token_analyzer.build_analysis(token, chain)
        if analysis is None:
            await message.answer(
                f"❌ No reliable market data for <code>{html.escape(token)}</code> on {chain}.",
                parse_mode="HTML",
            )
            return

        await message.answer(
            format_token_analysis(analysis), parse_mode="HTML", disable_web_page_preview=True
        )
    except Exception as e:
        logger.exception(f"[BOT] /analyze failed for {token}: {e}")
        await message.answer(ERROR_REPLY)


@router.message(Command("wallet"))
async def cmd_wallet(message: Message, wallet_analyzer: WalletPnLAnalyzer) -> None:
    """/wallet <wallet> <token>"""
    args = _args(message)
    if len(args) < 2:
        await message.answer("Usage: /wallet &lt;wallet&gt; &lt;token&gt;", parse_mode="HTML")
        return

    wallet, token = args[0][:MAX_ADDRESS_LEN], args[1][:MAX_ADDRESS_LEN]
    if not (is_valid_address(wallet) and is_valid_address(token)):
        await message.answer("❌ Invalid wallet or token address format.")
        return

    try:
        report = await wallet_analyzer.analyze(wallet, token)
        if report is None:
            await message.answer(
                "❌ No transaction or price data found for this wallet and token."
            )
            return
        await message.answer(format_wallet_report(report, wallet), parse_mode="HTML")
    except Exception as e:
        logger.exception(f"[BOT] /wallet failed for {wallet} / {token}: {e}")
        await message.answer(ERROR_REPLY)


@router.message(Command("status"))
async def cmd_status(message: Message, token_analyzer: TokenAnalyzer) -> None:
    """Live ETH and SOL prices."""
    try:
        eth, sol = await asyncio.gather(
            token_analyzer.build_analysis(WETH_ETHEREUM, "ethereum"),
            token_analyzer.build_analysis(WSOL_SOLANA, "solana"),
        )
        if eth is None and sol is None:
            await message.answer("❌ Failed to fetch current prices. Please try again later.")
            return
        await message.answer(format_status(eth, sol), parse_mode="HTML")
    except Exception as e:
        logger.exception(f"[BOT] /status failed: {e}")
        await message.answer(ERROR_REPLY)
