"""Shared test fixtures."""

from collections.abc import Callable
from typing import Any

import pytest

from src.parsers.dexscreener.models import DexScreenerPair


def build_pair(
    *,
    chain: str = "ethereum",
    dex: str = "uniswap",
    symbol: str = "PEPE",
    address: str = "0x6982508145454ce325ddbe47a25d4ec3d2311933",
    pair_address: str = "0xpair",
    price: str | None = "0.000012",
    liquidity: float | None = 250_000,
    volume_h24: float | None = 1_000_000,
    **extra: Any,
) -> DexScreenerPair:
    data: dict[str, Any] = {
        "chainId": chain,
        "dexId": dex,
        "pairAddress": pair_address,
        "baseToken": {"address": address, "name": f"{symbol} Token", "symbol": symbol},
        "priceUsd": price,
    }
    if liquidity is not None:
        data["liquidity"] = {"usd": liquidity}
    if volume_h24 is not None:
        data["volume"] = {"h24": volume_h24}
    data.update(extra)
    return DexScreenerPair.model_validate(data)


@pytest.fixture
def make_pair() -> Callable[..., DexScreenerPair]:
    """Factory for DexScreener pairs with sane defaults."""
    return build_pair
