"""Stablecoin price normalization.

Some pools quote stablecoins off by a power of ten (wrong decimals on one
side of the pair). Rescale those quotes back into the ~$1 peg range.
"""

from decimal import Decimal

from loguru import logger

from src.parsers.market_constants import (
    STABLECOIN_PEG,
    STABLECOIN_PEG_RANGE,
    STABLECOIN_RESCALE_BELOW,
    STABLECOIN_SCALE_FACTORS,
    is_stablecoin,
)


def normalize_price(price: Decimal | float, symbol: str | None) -> Decimal | float:
    """Return a canonical USD price for ``symbol``.

    Non-stablecoins and stablecoin quotes >= 0.1 come back unchanged (same
    object). Mis-scaled stablecoin quotes are multiplied by the first factor
    that lands inside the peg range, else pinned to 1.0. NaN passes through so
    the caller's validity check rejects it.
    """
    if not is_stablecoin(symbol):
        return price

    value = price if isinstance(price, Decimal) else Decimal(str(price))
    if value.is_nan() or value >= STABLECOIN_RESCALE_BELOW:
        return price

    low, high = STABLECOIN_PEG_RANGE
    for factor in STABLECOIN_SCALE_FACTORS:
        scaled = value * factor
        if low <= scaled <= high:
            logger.debug(f"[PRICE] {symbol} rescaled {value} x{factor} -> {scaled}")
            return scaled

    logger.debug(f"[PRICE] {symbol} quote {value} not rescalable, pinned to peg")
    return STABLECOIN_PEG
