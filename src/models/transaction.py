from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum


class TradeSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class Transaction:
    """One fill for a wallet/token pair.

    ``amount`` and ``price_usd`` keep the raw upstream values; the PnL
    engine parses them and drops the fill if either is not a finite number.
    """

    wallet_address: str
    token_contract: str
    side: TradeSide | str
    amount: Decimal | str | float
    price_usd: Decimal | str | float
    timestamp: datetime
    chain: str


@dataclass
class PnLResult:
    """Blended-cost P&L for one wallet/token position.

    Average prices are 0 (not NaN) when the matching total is 0: treat a zero
    average as "undefined", never as a fill at $0.
    """

    total_bought: Decimal
    total_sold: Decimal
    total_bought_value: Decimal
    total_sold_value: Decimal
    average_buy_price: Decimal
    average_sell_price: Decimal
    current_holdings: Decimal  # negative only if the feed is inconsistent
    current_price: Decimal
    realized_pnl: Decimal
    unrealized_pnl: Decimal
    buy_count: int
    sell_count: int
    skipped_count: int = 0
    warnings: list[str] = field(default_factory=list)

    @property
    def total_pnl(self) -> Decimal:
        return self.realized_pnl + self.unrealized_pnl

    @property
    def total_investment(self) -> Decimal:
        return self.total_bought * self.average_buy_price

    @property
    def total_pnl_pct(self) -> float:
        if self.total_investment <= 0:
            return 0.0
        return float(self.total_pnl / self.total_investment * 100)
