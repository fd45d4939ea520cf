"""Tests for per-chain pair validation and stablecoin fallbacks."""

from decimal import Decimal

import pytest

from src.parsers.pair_validator import (
    NOTE_BACKFILLED,
    NOTE_LOW_LIQUIDITY,
    NOTE_SYNTHETIC,
    filter_valid_pairs,
    parse_price,
)


class TestParsePrice:
    @pytest.mark.parametrize("raw", [None, "", "abc", "NaN", "Infinity", "-inf"])
    def test_unusable_values(self, raw) -> None:
        assert parse_price(raw) is None

    def test_valid_value(self) -> None:
        assert parse_price(" 0.00123 ") == Decimal("0.00123")


class TestChainFilter:
    def test_only_matching_chain_kept(self, make_pair) -> None:
        pairs = [
            make_pair(chain="ethereum", pair_address="0xa"),
            make_pair(chain="solana", pair_address="sol1"),
            make_pair(chain="bsc", pair_address="0xb"),
        ]
        result = filter_valid_pairs(pairs, "ethereum")
        assert [p.pairAddress for p in result] == ["0xa"]

    def test_chain_alias_substring_match(self, make_pair) -> None:
        pairs = [make_pair(chain="avax-c", pair_address="0xa")]
        assert len(filter_valid_pairs(pairs, "avalanche")) == 1

    def test_target_chain_case_insensitive(self, make_pair) -> None:
        pairs = [make_pair(chain="Base")]
        assert len(filter_valid_pairs(pairs, "BASE")) == 1

    def test_every_result_matches_target(self, make_pair) -> None:
        pairs = [make_pair(chain=c) for c in ("ethereum", "base", "solana", "polygon")]
        for target in ("ethereum", "base", "solana", "polygon"):
            result = filter_valid_pairs(pairs, target)
            assert all(target in p.chainId for p in result)

    def test_empty_input(self) -> None:
        assert filter_valid_pairs([], "ethereum") == []


class TestPriceChecks:
    @pytest.mark.parametrize("price", [None, "abc", "0", "-1", "NaN"])
    def test_bad_price_rejected(self, make_pair, price) -> None:
        assert filter_valid_pairs([make_pair(price=price)], "ethereum") == []

    def test_weth_out_of_range_rejected(self, make_pair) -> None:
        pair = make_pair(symbol="WETH", price="12.5")
        assert filter_valid_pairs([pair], "ethereum") == []

    def test_weth_in_range_kept(self, make_pair) -> None:
        pair = make_pair(symbol="WETH", price="3200.15")
        result = filter_valid_pairs([pair], "ethereum")
        assert result[0].price == Decimal("3200.15")

    def test_unlisted_symbol_skips_range_check(self, make_pair) -> None:
        pair = make_pair(symbol="PEPE", price="0.0000001")
        assert len(filter_valid_pairs([pair], "ethereum")) == 1

    def test_misscaled_stablecoin_normalized(self, make_pair) -> None:
        pair = make_pair(symbol="USDT", price="0.00004167", liquidity=2_000_000)
        result = filter_valid_pairs([pair], "ethereum")
        assert len(result) == 1
        assert result[0].price == Decimal("1.00008")
        assert Decimal(result[0].priceUsd) == Decimal("1.00008")
        assert result[0].raw_price_usd == "0.00004167"

    def test_missing_stablecoin_price_pinned_to_peg(self, make_pair) -> None:
        pair = make_pair(symbol="USDC", price=None, liquidity=2_000_000)
        result = filter_valid_pairs([pair], "ethereum")
        assert result[0].price == Decimal("1.0")
        assert NOTE_BACKFILLED in result[0].quality_notes


class TestLiquidity:
    def test_ethereum_floor(self, make_pair) -> None:
        pairs = [
            make_pair(liquidity=9_999, pair_address="0xlow"),
            make_pair(liquidity=10_000, pair_address="0xok"),
        ]
        result = filter_valid_pairs(pairs, "ethereum")
        assert [p.pairAddress for p in result] == ["0xok"]

    def test_other_chain_floor_is_lower(self, make_pair) -> None:
        pair = make_pair(chain="base", liquidity=6_000)
        assert len(filter_valid_pairs([pair], "base")) == 1
        assert filter_valid_pairs([make_pair(chain="ethereum", liquidity=6_000)], "ethereum") == []

    def test_unknown_liquidity_rejected_for_general_tokens(self, make_pair) -> None:
        pair = make_pair(liquidity=None)
        assert filter_valid_pairs([pair], "ethereum") == []

    def test_stablecoin_uses_lower_tier(self, make_pair) -> None:
        pair = make_pair(symbol="DAI", price="1.0", liquidity=1_500, chain="ethereum")
        result = filter_valid_pairs([pair], "ethereum")
        assert len(result) == 1
        assert result[0].liquidity_usd == Decimal("1500")


class TestStablecoinBackfill:
    def test_missing_fields_filled_present_fields_kept(self, make_pair) -> None:
        pair = make_pair(
            chain="base",
            symbol="USDC",
            price="1.0001",
            liquidity=None,
            volume_h24=12_345,
            fdv=999,
        )
        result = filter_valid_pairs([pair], "base")
        assert len(result) == 1
        validated = result[0]
        assert validated.liquidity_usd == Decimal("1000000")
        assert validated.volume_h24 == Decimal("12345")
        assert validated.fdv == Decimal("999")
        assert validated.marketCap == Decimal("40000000000")
        assert validated.txns.h24.buys == 8000
        assert validated.backfilled is True
        assert NOTE_BACKFILLED in validated.quality_notes

    def test_complete_stablecoin_pair_not_flagged(self, make_pair) -> None:
        pair = make_pair(
            symbol="USDT",
            price="1.0",
            liquidity=5_000_000,
            fdv=1,
            marketCap=1,
            txns={"h24": {"buys": 3, "sells": 4}},
        )
        result = filter_valid_pairs([pair], "ethereum")
        assert result[0].backfilled is False
        assert result[0].quality_notes == []
        assert result[0].txns.h24.buys == 3

    def test_input_pair_not_mutated(self, make_pair) -> None:
        pair = make_pair(symbol="USDT", price="0.00004167", liquidity=None, volume_h24=None)
        before = pair.model_dump()
        filter_valid_pairs([pair], "ethereum")
        assert pair.model_dump() == before


class TestSyntheticFallback:
    def test_thin_usdt_pool_on_base(self, make_pair) -> None:
        pair = make_pair(
            chain="base",
            symbol="USDT",
            price="0.00004167",
            liquidity=500,
            volume_h24=100,
        )
        result = filter_valid_pairs([pair], "base")
        assert len(result) == 1
        synthetic = result[0]
        assert synthetic.priceUsd == "1.0000"
        assert synthetic.price == Decimal("1.0000")
        assert synthetic.liquidity_usd == Decimal("1000000")
        assert synthetic.volume_h24 == Decimal("50000000000")
        assert synthetic.marketCap == Decimal("110000000000")
        assert synthetic.txns.h24.buys == 10000
        assert synthetic.synthetic is True
        assert synthetic.quality_notes == [NOTE_SYNTHETIC, NOTE_LOW_LIQUIDITY]

    def test_first_stablecoin_pair_is_template(self, make_pair) -> None:
        pairs = [
            make_pair(symbol="USDC", price="abc", pair_address="0xfirst"),
            make_pair(symbol="USDC", price="abc", pair_address="0xsecond"),
        ]
        result = filter_valid_pairs(pairs, "ethereum")
        assert [p.pairAddress for p in result] == ["0xfirst"]
        assert NOTE_LOW_LIQUIDITY not in result[0].quality_notes

    def test_no_fallback_for_general_tokens(self, make_pair) -> None:
        pair = make_pair(symbol="PEPE", liquidity=10)
        assert filter_valid_pairs([pair], "ethereum") == []

    def test_no_fallback_from_other_chain(self, make_pair) -> None:
        pair = make_pair(chain="solana", symbol="USDT", price="abc")
        assert filter_valid_pairs([pair], "ethereum") == []
