"""Derived trading-activity metrics for a token analysis.

Ratios are None when their denominator is unknown or zero; the flags are
advisory and never block an analysis.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from src.models.analysis import TokenAnalysis

SUSPICIOUS_VOLUME_LIQUIDITY_RATIO = 50.0  # 24h volume / liquidity
SUSPICIOUS_BUY_SELL_RATIO = 5.0
HIGH_PRICE_IMPACT_PCT = 10.0

IMPACT_TRADE_SIZES: tuple[int, ...] = (100, 1_000, 10_000)


@dataclass
class TradingMetrics:
    volume_liquidity_ratio: float | None
    buy_sell_ratio: float | None
    buy_share_pct: float | None  # buys / (buys + sells) * 100
    price_impact_pct: dict[int, float] = field(default_factory=dict)  # trade USD -> %
    warnings: list[str] = field(default_factory=list)

    @property
    def suspicious(self) -> bool:
        return bool(self.warnings)


def compute_trading_metrics(analysis: TokenAnalysis) -> TradingMetrics:
    liquidity = analysis.liquidity.usd
    volume = analysis.volume.h24
    has_liquidity = liquidity is not None and liquidity > 0

    vl_ratio = None
    if has_liquidity and volume is not None:
        vl_ratio = float(volume / liquidity)

    buy_sell = buy_share = None
    if analysis.transactions is not None:
        buys = analysis.transactions.buys_24h
        sells = analysis.transactions.sells_24h
        if sells > 0:
            buy_sell = buys / sells
        if buys + sells > 0:
            buy_share = buys / (buys + sells) * 100

    impacts: dict[int, float] = {}
    if has_liquidity:
        for size in IMPACT_TRADE_SIZES:
            impacts[size] = float(Decimal(size) / liquidity * 100)

    warnings: list[str] = []
    if vl_ratio is not None and vl_ratio > SUSPICIOUS_VOLUME_LIQUIDITY_RATIO:
        warnings.append("high_volume_liquidity_ratio")
    if buy_sell is not None and buy_sell > SUSPICIOUS_BUY_SELL_RATIO:
        warnings.append("unusual_buy_sell_ratio")
    if impacts.get(1_000, 0.0) > HIGH_PRICE_IMPACT_PCT:
        warnings.append("high_price_impact")

    return TradingMetrics(
        volume_liquidity_ratio=vl_ratio,
        buy_sell_ratio=buy_sell,
        buy_share_pct=buy_share,
        price_impact_pct=impacts,
        warnings=warnings,
    )
