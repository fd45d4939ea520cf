"""Preview the /analyze report for a token from the command line.

Tries chains in order (Solana first for base58 addresses) and prints the
first successful analysis as plain text.

Usage:
    python scripts/analyze_token.py 0xdAC17F958D2ee523a2206206994597C13D831ec7
    python scripts/analyze_token.py <address> --chain base --no-history
"""

import argparse
import asyncio
import html
import re
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from loguru import logger  # noqa: E402

from config.settings import settings  # noqa: E402
from src.bot.formatters import format_token_analysis  # noqa: E402
from src.bot.validators import is_solana_address  # noqa: E402
from src.parsers.dexscreener.client import DexScreenerClient  # noqa: E402
from src.parsers.geckoterminal.client import GeckoTerminalClient  # noqa: E402
from src.parsers.market_constants import SUPPORTED_CHAINS  # noqa: E402
from src.parsers.token_analysis import TokenAnalyzer  # noqa: E402
from src.utils.logger import setup_logger  # noqa: E402

TAG_RE = re.compile(r"<[^>]+>")


def chain_order(address: str) -> list[str]:
    if is_solana_address(address):
        return ["solana"] + [c for c in SUPPORTED_CHAINS if c != "solana"]
    return [c for c in SUPPORTED_CHAINS if c != "solana"] + ["solana"]


async def main() -> int:
    parser = argparse.ArgumentParser(description="Preview a token analysis")
    parser.add_argument("address")
    parser.add_argument("--chain", choices=SUPPORTED_CHAINS)
    parser.add_argument("--no-history", action="store_true", help="Skip the ATH lookup")
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()

    setup_logger(level=args.log_level)

    dexscreener = DexScreenerClient(max_rps=settings.dexscreener_max_rps)
    history = None if args.no_history else GeckoTerminalClient()
    analyzer = TokenAnalyzer(dexscreener, history)

    try:
        chains = [args.chain] if args.chain else chain_order(args.address)
        for chain in chains:
            logger.info(f"Trying {chain}")
            analysis = await analyzer.build_analysis(args.address, chain)
            if analysis is not None:
                print(html.unescape(TAG_RE.sub("", format_token_analysis(analysis))))
                return 0
        print(f"Failed to analyze {args.address} on any chain", file=sys.stderr)
        return 1
    finally:
        await dexscreener.close()
        if history is not None:
            await history.close()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
