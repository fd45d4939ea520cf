"""Runtime objects shared between the bot and the HTTP API.

Populated once in ``src.main`` before either surface starts; read directly
by FastAPI dependencies (single event loop).
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from src.parsers.token_analysis import TokenAnalyzer
    from src.parsers.transactions import TransactionStore
    from src.parsers.wallet_pnl import WalletPnLAnalyzer


class ServiceRegistry:
    """Holds references to runtime services for API access."""

    def __init__(self) -> None:
        self.token_analyzer: TokenAnalyzer | None = None
        self.wallet_analyzer: WalletPnLAnalyzer | None = None
        self.transaction_store: TransactionStore | None = None
        self.redis: Any | None = None  # redis.asyncio.Redis when cache_backend == "redis"
        self.started_at: float = time.monotonic()

    @property
    def uptime_sec(self) -> int:
        return int(time.monotonic() - self.started_at)


registry = ServiceRegistry()
