import asyncio
from typing import Any

import httpx
from loguru import logger

from src.parsers.dexscreener.models import DexScreenerPair
from src.parsers.rate_limiter import RateLimiter

BASE_URL = "https://api.dexscreener.com"
MAX_RETRIES = 3
RETRY_DELAYS = [1.0, 2.0, 4.0]


class DexScreenerApiError(Exception):
    pass


class DexScreenerClient:
    """Async REST client for DexScreener public API (no auth required)."""

    def __init__(
        self,
        rate_limiter: RateLimiter | None = None,
        max_rps: float = 4.0,
        base_url: str = BASE_URL,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=10.0,
            headers={"Accept": "application/json"},
        )
        self._rate_limiter = rate_limiter or RateLimiter(max_rps)

    async def _request_with_retry(self, path: str, **kwargs: Any) -> httpx.Response:
        """Execute GET with retry on 429/5xx/timeout."""
        for attempt in range(MAX_RETRIES):
            await self._rate_limiter.acquire()
            delay = RETRY_DELAYS[min(attempt, len(RETRY_DELAYS) - 1)]
            try:
                response = await self._client.get(path, **kwargs)
            except (httpx.TimeoutException, httpx.ConnectError) as e:
                if attempt < MAX_RETRIES - 1:
                    logger.debug(f"[DEXSCREENER] {type(e).__name__}, retrying in {delay}s")
                    await asyncio.sleep(delay)
                    continue
                raise DexScreenerApiError(f"Request failed: {path}: {e}") from e

            if response.status_code == 429 or response.status_code >= 500:
                if attempt < MAX_RETRIES - 1:
                    retry_after = response.headers.get("Retry-After")
                    if retry_after:
                        delay = max(float(retry_after), delay)
                    logger.debug(
                        f"[DEXSCREENER] {response.status_code}, retrying in {delay}s: {path}"
                    )
                    await asyncio.sleep(delay)
                    continue
                raise DexScreenerApiError(f"HTTP {response.status_code} after retries: {path}")

            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise DexScreenerApiError(f"HTTP {e.response.status_code}: {path}") from e
            return response

        raise DexScreenerApiError(f"Request failed after retries: {path}")

    @staticmethod
    def _parse_pairs(data: Any) -> list[DexScreenerPair]:
        if isinstance(data, list):
            return [DexScreenerPair.model_validate(p) for p in data]
        if not isinstance(data, dict):
            return []
        pairs = data.get("pairs", data.get("pair", []))
        if not isinstance(pairs, list):
            pairs = [pairs] if pairs else []
        return [DexScreenerPair.model_validate(p) for p in pairs]

    async def get_token_pairs(self, token_address: str) -> list[DexScreenerPair]:
        """Get all pairs for a token across every chain DexScreener indexes."""
        response = await self._request_with_retry(f"/latest/dex/tokens/{token_address}")
        return self._parse_pairs(response.json())

    async def search_pairs(self, query: str) -> list[DexScreenerPair]:
        """Free-text pair search; catches tokens the tokens endpoint misses."""
        response = await self._request_with_retry("/latest/dex/search", params={"q": query})
        return self._parse_pairs(response.json())

    async def close(self) -> None:
        await self._client.aclose()
