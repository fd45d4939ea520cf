"""Pick the representative pair and measure the cross-exchange spread."""

from dataclasses import dataclass
from decimal import Decimal

from loguru import logger

from src.models.analysis import PriceDifferential
from src.parsers.dexscreener.models import DexScreenerPair, ValidatedPair
from src.parsers.price_normalizer import normalize_price

DEFAULT_SUSPICIOUS_SPREAD_PCT = 10.0


@dataclass
class PairSelection:
    best: ValidatedPair
    differential: PriceDifferential | None = None


def pair_score(pair: DexScreenerPair) -> Decimal:
    """Liquidity + 24h volume, unknown values counted as 0."""
    liquidity = pair.liquidity_usd or Decimal(0)
    volume = pair.volume_h24 or Decimal(0)
    return liquidity + volume


def compute_price_differential(
    pairs: list[ValidatedPair],
    *,
    suspicious_spread_pct: float = DEFAULT_SUSPICIOUS_SPREAD_PCT,
) -> PriceDifferential | None:
    """Max/min normalized price across pairs. None for fewer than two pairs."""
    if len(pairs) < 2:
        return None

    prices = [(Decimal(normalize_price(p.price, p.symbol)), p.dexId) for p in pairs]
    max_price, max_dex = prices[0]
    min_price, min_dex = prices[0]
    for price, dex in prices[1:]:
        if price > max_price:
            max_price, max_dex = price, dex
        if price < min_price:
            min_price, min_dex = price, dex

    if min_price <= 0:
        return None

    spread = float((max_price - min_price) / min_price * 100)
    suspicious = spread > suspicious_spread_pct
    if suspicious:
        logger.info(
            f"[PAIRS] Wide spread {spread:.2f}%: max {max_price} ({max_dex}), "
            f"min {min_price} ({min_dex})"
        )
    return PriceDifferential(
        max_price=max_price,
        min_price=min_price,
        max_dex=max_dex,
        min_dex=min_dex,
        spread_percent=spread,
        suspicious=suspicious,
    )


def select_best_pair(
    pairs: list[ValidatedPair],
    *,
    suspicious_spread_pct: float = DEFAULT_SUSPICIOUS_SPREAD_PCT,
) -> PairSelection | None:
    """Highest liquidity+volume pair wins; ties keep input order."""
    if not pairs:
        return None

    best = max(pairs, key=pair_score)
    logger.debug(
        f"[PAIRS] Selected {best.dexId} {best.pairAddress} on {best.chainId} "
        f"(score {pair_score(best)})"
    )
    differential = compute_price_differential(
        pairs, suspicious_spread_pct=suspicious_spread_pct
    )
    return PairSelection(best=best, differential=differential)
