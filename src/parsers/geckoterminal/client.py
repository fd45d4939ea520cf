"""GeckoTerminal public API client for pool OHLCV history.

Free tier, ~30 calls/min, multi-chain. Used only for the all-time-high
lookup, so every failure is non-fatal for the caller.
"""

import asyncio
from typing import Any

import httpx
from loguru import logger

from src.parsers.geckoterminal.models import Candle
from src.parsers.rate_limiter import RateLimiter

BASE_URL = "https://api.geckoterminal.com/api/v2"
MAX_RETRIES = 2
RETRY_DELAYS = [2.0, 5.0]

# Our chain names -> GeckoTerminal network ids
NETWORK_IDS: dict[str, str] = {
    "ethereum": "eth",
    "base": "base",
    "avalanche": "avax",
    "solana": "solana",
    "bsc": "bsc",
    "arbitrum": "arbitrum",
    "polygon": "polygon_pos",
    "optimism": "optimism",
}


class GeckoTerminalApiError(Exception):
    pass


class GeckoTerminalClient:
    """Async client for GeckoTerminal pool OHLCV endpoints."""

    def __init__(
        self,
        rate_limiter: RateLimiter | None = None,
        max_rps: float = 0.5,
        base_url: str = BASE_URL,
    ) -> None:
        self._rate_limiter = rate_limiter or RateLimiter(max_rps)
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=15.0,
            headers={"Accept": "application/json"},
        )

    async def _request(self, path: str, **kwargs: Any) -> dict[str, Any]:
        """Rate-limited GET with retry on 429 and transient errors."""
        last_exc: Exception | None = None

        for attempt in range(MAX_RETRIES + 1):
            await self._rate_limiter.acquire()
            try:
                resp = await self._client.get(path, **kwargs)

                if resp.status_code == 429 or resp.status_code >= 500:
                    if attempt < MAX_RETRIES:
                        delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
                        logger.debug(
                            f"[HISTORY] {resp.status_code}, retry {attempt + 1} in {delay}s: {path}"
                        )
                        await asyncio.sleep(delay)
                        continue
                    raise GeckoTerminalApiError(f"HTTP {resp.status_code} after retries: {path}")

                resp.raise_for_status()
                return resp.json()

            except (httpx.TimeoutException, httpx.ConnectError) as e:
                last_exc = e
                if attempt < MAX_RETRIES:
                    delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
                    await asyncio.sleep(delay)
                    continue
                raise GeckoTerminalApiError(f"Request failed: {path}: {e}") from e
            except httpx.HTTPStatusError as e:
                raise GeckoTerminalApiError(f"HTTP {e.response.status_code}: {path}") from e

        raise GeckoTerminalApiError(f"Request failed after retries: {path}") from last_exc

    async def get_daily_candles(
        self, chain: str, pool_address: str, limit: int = 1000
    ) -> list[Candle]:
        """Daily candles for a pool, oldest first. Empty for unknown chains."""
        network = NETWORK_IDS.get(chain)
        if network is None or not pool_address:
            return []

        data = await self._request(
            f"/networks/{network}/pools/{pool_address}/ohlcv/day",
            params={"limit": limit, "currency": "usd"},
        )
        rows = (
            data.get("data", {}).get("attributes", {}).get("ohlcv_list", [])
            if isinstance(data, dict)
            else []
        )
        candles: list[Candle] = []
        for row in rows:
            try:
                candles.append(Candle.from_row(row))
            except (TypeError, ValueError) as e:
                logger.debug(f"[HISTORY] Skipping malformed candle {row!r}: {e}")
        candles.sort(key=lambda c: c.timestamp)
        return candles

    async def close(self) -> None:
        await self._client.aclose()
