from datetime import UTC, datetime
from decimal import Decimal

from pydantic import BaseModel


class Candle(BaseModel):
    """One OHLCV bar. GeckoTerminal returns them as [ts, o, h, l, c, v] rows."""

    timestamp: int  # unix seconds
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal

    model_config = {"extra": "ignore"}

    @classmethod
    def from_row(cls, row: list) -> "Candle":
        ts, o, h, low, c, v = row[:6]
        return cls(timestamp=int(ts), open=o, high=h, low=low, close=c, volume=v)

    @property
    def opened_at(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp, tz=UTC)
