"""All-time-high and token age derived from candles and pair timestamps."""

from datetime import UTC, datetime
from decimal import Decimal

from src.models.analysis import AllTimeHigh
from src.parsers.dexscreener.models import DexScreenerPair
from src.parsers.geckoterminal.models import Candle
from src.parsers.price_normalizer import normalize_price
from src.parsers.time_format import format_duration, format_time_ago, from_millis, maturity_label

JUST_NOW = "just now"
UNKNOWN_AGE = "Unknown"


def compute_all_time_high(
    candles: list[Candle],
    live_price: Decimal,
    now: datetime | None = None,
    symbol: str | None = None,
) -> AllTimeHigh | None:
    """Max candle high, challenged by the (already normalized) live price.

    Candle highs go through the same stablecoin normalization as the live
    price before comparing. No candles means the high is unknown (None),
    not the live price.
    """
    if not candles:
        return None

    highs = [(Decimal(normalize_price(c.high, symbol)), c) for c in candles]
    top_high, top = max(highs, key=lambda item: item[0])
    if live_price > top_high:
        return AllTimeHigh(price=live_price, timestamp=None, label=JUST_NOW)
    return AllTimeHigh(
        price=top_high,
        timestamp=top.opened_at,
        label=format_time_ago(top.opened_at, now),
    )


def creation_time(pair: DexScreenerPair) -> tuple[datetime | None, str | None]:
    """Earliest known timestamp: token creation, then pair creation, then listing."""
    candidates = (
        (pair.baseToken.createdAt if pair.baseToken else None, "token"),
        (pair.pairCreatedAt, "pair"),
        (pair.createdAt, "listing"),
    )
    for value, source in candidates:
        moment = from_millis(value)
        if moment is not None:
            return moment, source
    return None, None


def describe_token_age(pair: DexScreenerPair, now: datetime | None = None) -> str:
    """e.g. ``"3mo (Established)"``; suffixed when not based on token creation."""
    moment, source = creation_time(pair)
    if moment is None:
        return UNKNOWN_AGE

    now = now or datetime.now(UTC)
    age_seconds = max((now - moment).total_seconds(), 0)
    descriptor = f"{format_duration(age_seconds)} ({maturity_label(age_seconds)})"
    if source == "pair":
        descriptor += ", based on pair creation"
    elif source == "listing":
        descriptor += ", based on listing"
    return descriptor
