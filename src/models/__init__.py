from src.models.analysis import (
    AllTimeHigh,
    LiquidityInfo,
    PriceDifferential,
    TokenAnalysis,
    TxnCounts,
    VolumeInfo,
)
from src.models.transaction import PnLResult, TradeSide, Transaction

__all__ = [
    "AllTimeHigh",
    "LiquidityInfo",
    "PnLResult",
    "PriceDifferential",
    "TokenAnalysis",
    "TradeSide",
    "Transaction",
    "TxnCounts",
    "VolumeInfo",
]
