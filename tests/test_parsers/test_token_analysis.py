"""Tests for TokenAnalyzer orchestration (sources mocked)."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from src.db.cache import MemoryCache
from src.models.analysis import TokenAnalysis
from src.parsers.dexscreener.client import DexScreenerApiError
from src.parsers.geckoterminal.client import GeckoTerminalApiError
from src.parsers.geckoterminal.models import Candle
from src.parsers.pair_selector import select_best_pair
from src.parsers.pair_validator import NOTE_SYNTHETIC, filter_valid_pairs
from src.parsers.token_analysis import (
    WARN_WIDE_SPREAD,
    TokenAnalyzer,
    assemble_analysis,
    cache_key,
)

TOKEN = "0x6982508145454ce325ddbe47a25d4ec3d2311933"


def _pair_source(pairs=None, search=None):
    source = MagicMock()
    source.get_token_pairs = AsyncMock(return_value=pairs or [])
    source.search_pairs = AsyncMock(return_value=search or [])
    return source


def _candle_source(candles=None, error=None):
    source = MagicMock()
    source.get_daily_candles = AsyncMock(return_value=candles or [], side_effect=error)
    return source


def _candle(high: str, days_ago: int = 20) -> Candle:
    ts = int((datetime.now(UTC) - timedelta(days=days_ago)).timestamp())
    return Candle.from_row([ts, "0.00001", high, "0.00001", "0.00001", "5000"])


class TestAssembleAnalysis:
    def test_fields_from_best_pair(self, make_pair) -> None:
        pair = make_pair(
            price="0.000012",
            priceChange={"h1": 1.5, "h24": -4.2},
            txns={"h24": {"buys": 120, "sells": 80}},
            fdv=5_000_000,
            marketCap=4_000_000,
            url="https://dexscreener.com/ethereum/0xpair",
        )
        selection = select_best_pair(filter_valid_pairs([pair], "ethereum"))
        analysis = assemble_analysis(TOKEN, "ethereum", selection, None)

        assert analysis.symbol == "PEPE"
        assert analysis.name == "PEPE Token"
        assert analysis.price_usd == Decimal("0.000012")
        assert analysis.price_change_1h == 1.5
        assert analysis.price_change_24h == -4.2
        assert analysis.liquidity.usd == Decimal("250000")
        assert analysis.volume.h24 == Decimal("1000000")
        assert analysis.transactions.buys_24h == 120
        assert analysis.market_cap == Decimal("4000000")
        assert analysis.ath is None
        assert analysis.age == "Unknown"
        assert analysis.url == "https://dexscreener.com/ethereum/0xpair"

    def test_partial_txns_left_unknown(self, make_pair) -> None:
        pair = make_pair(txns={"h24": {"buys": 10}})
        selection = select_best_pair(filter_valid_pairs([pair], "ethereum"))
        assert assemble_analysis(TOKEN, "ethereum", selection, None).transactions is None

    def test_default_url(self, make_pair) -> None:
        selection = select_best_pair(filter_valid_pairs([make_pair()], "ethereum"))
        analysis = assemble_analysis(TOKEN, "ethereum", selection, None)
        assert analysis.url == f"https://dexscreener.com/ethereum/{TOKEN}"

    def test_wide_spread_warning(self, make_pair) -> None:
        pairs = [
            make_pair(dex="uniswap", pair_address="0x1", price="1.0"),
            make_pair(dex="sushiswap", pair_address="0x2", price="1.5"),
        ]
        selection = select_best_pair(filter_valid_pairs(pairs, "ethereum"))
        analysis = assemble_analysis(TOKEN, "ethereum", selection, None, validated_pairs=2)
        assert WARN_WIDE_SPREAD in analysis.warnings
        assert analysis.validated_pairs == 2
        assert analysis.price_differential.suspicious is True


class TestBuildAnalysis:
    @pytest.mark.asyncio
    async def test_success_with_ath(self, make_pair) -> None:
        pairs = [make_pair(price="0.000012")]
        analyzer = TokenAnalyzer(
            _pair_source(pairs),
            _candle_source([_candle("0.00003"), _candle("0.00002", days_ago=5)]),
        )
        analysis = await analyzer.build_analysis(TOKEN, "ethereum")

        assert analysis is not None
        assert analysis.price_usd > 0
        assert analysis.ath.price == Decimal("0.00003")
        assert analysis.ath.label.endswith("ago")
        assert analysis.from_ath_pct == pytest.approx(-60.0)

    @pytest.mark.asyncio
    async def test_history_failure_leaves_ath_unknown(self, make_pair) -> None:
        analyzer = TokenAnalyzer(
            _pair_source([make_pair()]),
            _candle_source(error=GeckoTerminalApiError("boom")),
        )
        analysis = await analyzer.build_analysis(TOKEN, "ethereum")
        assert analysis is not None
        assert analysis.ath is None

    @pytest.mark.asyncio
    async def test_empty_history_leaves_ath_unknown(self, make_pair) -> None:
        analyzer = TokenAnalyzer(_pair_source([make_pair()]), _candle_source([]))
        analysis = await analyzer.build_analysis(TOKEN, "ethereum")
        assert analysis.ath is None

    @pytest.mark.asyncio
    async def test_upstream_error_returns_none(self) -> None:
        source = _pair_source()
        source.get_token_pairs.side_effect = DexScreenerApiError("HTTP 500")
        analyzer = TokenAnalyzer(source)
        assert await analyzer.build_analysis(TOKEN, "ethereum") is None

    @pytest.mark.asyncio
    async def test_network_error_returns_none(self) -> None:
        source = _pair_source()
        source.get_token_pairs.side_effect = httpx.ConnectError("down")
        assert await TokenAnalyzer(source).build_analysis(TOKEN, "ethereum") is None

    @pytest.mark.asyncio
    async def test_no_pairs_returns_none(self) -> None:
        assert await TokenAnalyzer(_pair_source()).build_analysis(TOKEN, "ethereum") is None

    @pytest.mark.asyncio
    async def test_no_valid_pairs_on_chain_returns_none(self, make_pair) -> None:
        analyzer = TokenAnalyzer(_pair_source([make_pair(chain="solana")]))
        assert await analyzer.build_analysis(TOKEN, "ethereum") is None

    @pytest.mark.asyncio
    async def test_search_fallback(self, make_pair) -> None:
        source = _pair_source([], search=[make_pair()])
        analysis = await TokenAnalyzer(source).build_analysis(TOKEN, "ethereum")
        assert analysis is not None
        source.search_pairs.assert_awaited_once_with(TOKEN)

    @pytest.mark.asyncio
    async def test_quote_side_pairs_ignored_when_base_pairs_exist(self, make_pair) -> None:
        base_pair = make_pair(pair_address="0xbase", liquidity=20_000, volume_h24=0)
        quote_pair = make_pair(
            pair_address="0xquote",
            address="0xweth",
            symbol="WETH",
            price="3000",
            liquidity=9_000_000,
        )
        analyzer = TokenAnalyzer(_pair_source([quote_pair, base_pair]))
        analysis = await analyzer.build_analysis(TOKEN, "ethereum")
        assert analysis.pair_address == "0xbase"

    @pytest.mark.asyncio
    async def test_quote_only_pairs_give_no_analysis(self, make_pair) -> None:
        """A token seen only as quote must not borrow the base token's price."""
        weth_pair = make_pair(
            address="0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2",
            symbol="WETH",
            price="3000",
            liquidity=9_000_000,
            quoteToken={"address": TOKEN, "symbol": "PEPE"},
        )
        source = _pair_source([], search=[weth_pair])
        analyzer = TokenAnalyzer(source)

        assert await analyzer.fetch_pairs(TOKEN) == []
        assert await analyzer.build_analysis(TOKEN, "ethereum") is None

    @pytest.mark.asyncio
    async def test_base_match_ignores_address_case(self, make_pair) -> None:
        pair = make_pair(address=TOKEN.upper().replace("0X", "0x"))
        pairs = await TokenAnalyzer(_pair_source([pair])).fetch_pairs(TOKEN)
        assert pairs == [pair]

    @pytest.mark.asyncio
    async def test_stablecoin_ath_compared_after_normalization(self, make_pair) -> None:
        pair = make_pair(
            chain="base",
            symbol="USDT",
            address="0xusdt",
            price="0.00004167",
            liquidity=2_000_000,
        )
        analyzer = TokenAnalyzer(_pair_source([pair]), _candle_source([_candle("0.0000425")]))
        analysis = await analyzer.build_analysis("0xusdt", "base")

        assert analysis.price_usd == Decimal("1.00008")
        assert analysis.ath.price == Decimal("1.02")
        assert analysis.ath.label != "just now"
        assert analysis.ath.label.endswith("ago")

    @pytest.mark.asyncio
    async def test_synthetic_stablecoin(self, make_pair) -> None:
        pair = make_pair(
            chain="base",
            symbol="USDT",
            address="0xusdt",
            price="0.00004167",
            liquidity=500,
        )
        analysis = await TokenAnalyzer(_pair_source([pair])).build_analysis("0xusdt", "base")
        assert analysis.price_usd == Decimal("1.0000")
        assert NOTE_SYNTHETIC in analysis.warnings


class TestCaching:
    @pytest.mark.asyncio
    async def test_hit_skips_upstream(self, make_pair) -> None:
        source = _pair_source([make_pair()])
        analyzer = TokenAnalyzer(source, cache=MemoryCache())

        first = await analyzer.build_analysis(TOKEN, "ethereum")
        second = await analyzer.build_analysis(TOKEN, "ethereum")

        assert first == second
        assert source.get_token_pairs.await_count == 1

    @pytest.mark.asyncio
    async def test_chain_is_part_of_key(self, make_pair) -> None:
        source = _pair_source([make_pair(), make_pair(chain="base", pair_address="0xb")])
        analyzer = TokenAnalyzer(source, cache=MemoryCache())

        eth = await analyzer.build_analysis(TOKEN, "ethereum")
        base = await analyzer.build_analysis(TOKEN, "base")

        assert eth.chain_id == "ethereum"
        assert base.chain_id == "base"
        assert source.get_token_pairs.await_count == 2

    @pytest.mark.asyncio
    async def test_failures_not_cached(self) -> None:
        cache = MemoryCache()
        analyzer = TokenAnalyzer(_pair_source(), cache=cache)
        await analyzer.build_analysis(TOKEN, "ethereum")
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_unreadable_entry_dropped(self, make_pair) -> None:
        cache = MemoryCache()
        await cache.set(cache_key("ethereum", TOKEN), "not json", 60)
        analyzer = TokenAnalyzer(_pair_source([make_pair()]), cache=cache)

        analysis = await analyzer.build_analysis(TOKEN, "ethereum")

        assert isinstance(analysis, TokenAnalysis)
        cached = await cache.get(cache_key("ethereum", TOKEN))
        assert TokenAnalysis.model_validate_json(cached) == analysis


class TestDetectChain:
    @pytest.mark.asyncio
    async def test_highest_scoring_supported_chain(self, make_pair) -> None:
        pairs = [
            make_pair(chain="base", liquidity=10_000),
            make_pair(chain="solana", liquidity=900_000),
        ]
        assert await TokenAnalyzer(_pair_source(pairs)).detect_chain(TOKEN) == "solana"

    @pytest.mark.asyncio
    async def test_ignored_chain_skipped(self, make_pair) -> None:
        pairs = [
            make_pair(chain="pulsechain", liquidity=5_000_000),
            make_pair(chain="ethereum", liquidity=10_000),
        ]
        assert await TokenAnalyzer(_pair_source(pairs)).detect_chain(TOKEN) == "ethereum"

    @pytest.mark.asyncio
    async def test_unknown_chain_returns_none(self, make_pair) -> None:
        pairs = [make_pair(chain="fantom")]
        assert await TokenAnalyzer(_pair_source(pairs)).detect_chain(TOKEN) is None

    @pytest.mark.asyncio
    async def test_quote_only_pairs_detect_nothing(self, make_pair) -> None:
        pairs = [make_pair(address="0xweth", symbol="WETH", quoteToken={"address": TOKEN})]
        assert await TokenAnalyzer(_pair_source(pairs)).detect_chain(TOKEN) is None

    @pytest.mark.asyncio
    async def test_error_returns_none(self) -> None:
        source = _pair_source()
        source.get_token_pairs.side_effect = DexScreenerApiError("rate limited")
        assert await TokenAnalyzer(source).detect_chain(TOKEN) is None
