from decimal import Decimal

from pydantic import BaseModel, Field


class DexScreenerToken(BaseModel):
    address: str = ""
    name: str | None = None
    symbol: str | None = None
    createdAt: int | None = None  # ms epoch, rarely populated

    model_config = {"extra": "ignore"}


class DexScreenerPriceChange(BaseModel):
    m5: float | None = None
    h1: float | None = None
    h6: float | None = None
    h24: float | None = None

    model_config = {"extra": "ignore"}


class DexScreenerVolume(BaseModel):
    m5: Decimal | None = None
    h1: Decimal | None = None
    h6: Decimal | None = None
    h24: Decimal | None = None

    model_config = {"extra": "ignore"}


class DexScreenerLiquidity(BaseModel):
    usd: Decimal | None = None
    base: Decimal | None = None
    quote: Decimal | None = None
    h24: Decimal | None = None  # 24h liquidity change, when reported

    model_config = {"extra": "ignore"}


class DexScreenerTxns(BaseModel):
    buys: int | None = None
    sells: int | None = None

    model_config = {"extra": "ignore"}


class DexScreenerTxnsByPeriod(BaseModel):
    m5: DexScreenerTxns | None = None
    h1: DexScreenerTxns | None = None
    h6: DexScreenerTxns | None = None
    h24: DexScreenerTxns | None = None

    model_config = {"extra": "ignore"}


class DexScreenerPair(BaseModel):
    """One trading pair as returned by DexScreener.

    Optional fields stay ``None`` when the feed omits them: unknown is not zero.
    """

    chainId: str = ""
    dexId: str = ""
    url: str | None = None
    pairAddress: str = ""
    baseToken: DexScreenerToken | None = None
    quoteToken: DexScreenerToken | None = None
    priceUsd: str | None = None
    priceChange: DexScreenerPriceChange | None = None
    volume: DexScreenerVolume | None = None
    liquidity: DexScreenerLiquidity | None = None
    fdv: Decimal | None = None
    marketCap: Decimal | None = None
    pairCreatedAt: int | None = None
    createdAt: int | None = None  # listing timestamp
    txns: DexScreenerTxnsByPeriod | None = None

    model_config = {"extra": "ignore"}

    @property
    def symbol(self) -> str:
        if self.baseToken and self.baseToken.symbol:
            return self.baseToken.symbol.strip().upper()
        return ""

    @property
    def liquidity_usd(self) -> Decimal | None:
        return self.liquidity.usd if self.liquidity else None

    @property
    def volume_h24(self) -> Decimal | None:
        return self.volume.h24 if self.volume else None


class ValidatedPair(DexScreenerPair):
    """A pair that passed chain, price and liquidity checks.

    ``price`` is the normalized USD price; ``priceUsd`` carries the same value
    as a string and ``raw_price_usd`` keeps what the feed reported.
    """

    price: Decimal
    raw_price_usd: str | None = None
    backfilled: bool = False
    synthetic: bool = False
    quality_notes: list[str] = Field(default_factory=list)
