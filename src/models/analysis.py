from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class PriceDifferential(BaseModel):
    """Cross-exchange price spread over the validated pairs of one chain."""

    max_price: Decimal
    min_price: Decimal
    max_dex: str
    min_dex: str
    spread_percent: float
    suspicious: bool = False


class LiquidityInfo(BaseModel):
    usd: Decimal | None = None
    change_24h: Decimal | None = None


class VolumeInfo(BaseModel):
    h1: Decimal | None = None
    h6: Decimal | None = None
    h24: Decimal | None = None


class TxnCounts(BaseModel):
    buys_24h: int
    sells_24h: int


class AllTimeHigh(BaseModel):
    price: Decimal
    timestamp: datetime | None = None  # None when the live price is the high
    label: str  # "just now", "3mo ago"


class TokenAnalysis(BaseModel):
    """Market snapshot for one token on one chain.

    Serialized as JSON into the analysis cache; ``price_usd`` is always > 0.
    """

    chain_id: str
    dex_id: str
    pair_address: str
    token_address: str
    symbol: str
    name: str
    price_usd: Decimal
    price_change_1h: float | None = None
    price_change_24h: float | None = None
    liquidity: LiquidityInfo = Field(default_factory=LiquidityInfo)
    volume: VolumeInfo = Field(default_factory=VolumeInfo)
    transactions: TxnCounts | None = None
    fdv: Decimal | None = None
    market_cap: Decimal | None = None
    ath: AllTimeHigh | None = None
    age: str = "Unknown"
    price_differential: PriceDifferential | None = None
    validated_pairs: int = 1
    warnings: list[str] = Field(default_factory=list)
    url: str | None = None

    @property
    def from_ath_pct(self) -> float | None:
        """Percent distance of the current price from the all-time high."""
        if self.ath is None or self.ath.price <= 0:
            return None
        return float((self.price_usd - self.ath.price) / self.ath.price * 100)
