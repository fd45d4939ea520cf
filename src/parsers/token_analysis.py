"""Token analysis: DexScreener pairs in, one TokenAnalysis out.

Flow: fetch pairs -> filter_valid_pairs (per chain) -> select_best_pair ->
best-effort ATH from pool candles -> assemble. Results are cached by
``chain:tokenContract``; a cache hit is returned without re-validation.
"""

from datetime import datetime
from decimal import Decimal
from typing import Protocol

import httpx
from loguru import logger
from pydantic import ValidationError

from src.db.cache import AnalysisCache
from src.models.analysis import LiquidityInfo, TokenAnalysis, TxnCounts, VolumeInfo
from src.parsers.dexscreener.client import DexScreenerApiError
from src.parsers.dexscreener.models import DexScreenerPair
from src.parsers.geckoterminal.client import GeckoTerminalApiError
from src.parsers.geckoterminal.models import Candle
from src.parsers.market_constants import resolve_chain
from src.parsers.pair_selector import (
    DEFAULT_SUSPICIOUS_SPREAD_PCT,
    PairSelection,
    pair_score,
    select_best_pair,
)
from src.parsers.pair_validator import filter_valid_pairs
from src.parsers.price_history import compute_all_time_high, describe_token_age
from src.parsers.price_normalizer import normalize_price

WARN_WIDE_SPREAD = "wide_price_spread"
DEFAULT_CACHE_TTL_SEC = 300


class PairSource(Protocol):
    async def get_token_pairs(self, token_address: str) -> list[DexScreenerPair]: ...

    async def search_pairs(self, query: str) -> list[DexScreenerPair]: ...


class CandleSource(Protocol):
    async def get_daily_candles(self, chain: str, pool_address: str) -> list[Candle]: ...


def cache_key(chain: str, token_contract: str) -> str:
    return f"{chain}:{token_contract}"


def assemble_analysis(
    token_contract: str,
    chain: str,
    selection: PairSelection,
    candles: list[Candle] | None,
    *,
    validated_pairs: int = 1,
    now: datetime | None = None,
) -> TokenAnalysis:
    """Build the TokenAnalysis record from an already-made pair selection."""
    best = selection.best
    symbol = best.symbol or "?"
    base = best.baseToken
    price = Decimal(normalize_price(best.price, symbol))

    ath = compute_all_time_high(candles or [], price, now, symbol=symbol)

    warnings = list(best.quality_notes)
    if selection.differential is not None and selection.differential.suspicious:
        warnings.append(WARN_WIDE_SPREAD)

    transactions = None
    if best.txns and best.txns.h24:
        h24 = best.txns.h24
        if h24.buys is not None and h24.sells is not None:
            transactions = TxnCounts(buys_24h=h24.buys, sells_24h=h24.sells)

    return TokenAnalysis(
        chain_id=best.chainId,
        dex_id=best.dexId,
        pair_address=best.pairAddress,
        token_address=(base.address if base and base.address else token_contract),
        symbol=symbol,
        name=(base.name if base and base.name else symbol),
        price_usd=price,
        price_change_1h=best.priceChange.h1 if best.priceChange else None,
        price_change_24h=best.priceChange.h24 if best.priceChange else None,
        liquidity=LiquidityInfo(
            usd=best.liquidity_usd,
            change_24h=best.liquidity.h24 if best.liquidity else None,
        ),
        volume=VolumeInfo(
            h1=best.volume.h1 if best.volume else None,
            h6=best.volume.h6 if best.volume else None,
            h24=best.volume_h24,
        ),
        transactions=transactions,
        fdv=best.fdv,
        market_cap=best.marketCap,
        ath=ath,
        age=describe_token_age(best, now),
        price_differential=selection.differential,
        validated_pairs=validated_pairs,
        warnings=warnings,
        url=best.url or f"https://dexscreener.com/{chain}/{token_contract}",
    )


class TokenAnalyzer:
    """Builds token analyses from injected data sources and cache."""

    def __init__(
        self,
        pair_source: PairSource,
        candle_source: CandleSource | None = None,
        cache: AnalysisCache | None = None,
        *,
        cache_ttl: int = DEFAULT_CACHE_TTL_SEC,
        suspicious_spread_pct: float = DEFAULT_SUSPICIOUS_SPREAD_PCT,
    ) -> None:
        self._pairs = pair_source
        self._candles = candle_source
        self._cache = cache
        self._cache_ttl = cache_ttl
        self._suspicious_spread_pct = suspicious_spread_pct

    async def fetch_pairs(self, token_contract: str) -> list[DexScreenerPair]:
        """Tokens endpoint first, search endpoint when it comes back empty.

        Only pairs quoting the token as base are returned: priceUsd is always
        the base token's price, so a quote-side pair would price another token.
        """
        pairs = await self._pairs.get_token_pairs(token_contract)
        if not pairs:
            logger.debug(f"[ANALYSIS] No pairs for {token_contract}, trying search")
            pairs = await self._pairs.search_pairs(token_contract)

        wanted = token_contract.lower()
        as_base = [
            p for p in pairs
            if p.baseToken is not None and p.baseToken.address.lower() == wanted
        ]
        if pairs and not as_base:
            logger.info(
                f"[ANALYSIS] {token_contract} only trades as quote token "
                f"({len(pairs)} pairs), skipping"
            )
        return as_base

    async def detect_chain(self, token_contract: str) -> str | None:
        """Supported chain of the highest-scoring pair for the token."""
        try:
            pairs = await self.fetch_pairs(token_contract)
        except (DexScreenerApiError, httpx.HTTPError, ValidationError) as e:
            logger.warning(f"[ANALYSIS] Chain detection failed for {token_contract}: {e}")
            return None

        ranked = sorted(pairs, key=pair_score, reverse=True)
        for pair in ranked:
            chain = resolve_chain(pair.chainId)
            if chain is not None:
                logger.debug(f"[ANALYSIS] Detected {chain} from chainId {pair.chainId}")
                return chain
        logger.info(f"[ANALYSIS] No supported chain for {token_contract}")
        return None

    async def build_analysis(self, token_contract: str, chain: str) -> TokenAnalysis | None:
        """Full analysis for ``token_contract`` on ``chain``; None when unavailable."""
        chain = chain.lower()
        key = cache_key(chain, token_contract)

        cached = await self._get_cached(key)
        if cached is not None:
            return cached

        try:
            pairs = await self.fetch_pairs(token_contract)
        except (DexScreenerApiError, httpx.HTTPError, ValidationError) as e:
            logger.warning(f"[ANALYSIS] Pair fetch failed for {token_contract}: {e}")
            return None

        if not pairs:
            logger.info(f"[ANALYSIS] No pairs found for {token_contract}")
            return None

        valid = filter_valid_pairs(pairs, chain)
        selection = select_best_pair(
            valid, suspicious_spread_pct=self._suspicious_spread_pct
        )
        if selection is None:
            logger.info(f"[ANALYSIS] No valid {chain} pairs for {token_contract}")
            return None

        candles = await self._fetch_candles(chain, selection.best.pairAddress)
        analysis = assemble_analysis(
            token_contract, chain, selection, candles, validated_pairs=len(valid)
        )
        logger.info(
            f"[ANALYSIS] {analysis.symbol} on {chain}: ${analysis.price_usd} "
            f"via {analysis.dex_id} ({len(valid)}/{len(pairs)} pairs valid)"
        )

        if self._cache is not None:
            await self._cache.set(key, analysis.model_dump_json(), self._cache_ttl)
        return analysis

    async def _get_cached(self, key: str) -> TokenAnalysis | None:
        if self._cache is None:
            return None
        raw = await self._cache.get(key)
        if raw is None:
            return None
        try:
            return TokenAnalysis.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"[CACHE] Dropping unreadable entry {key}: {e}")
            await self._cache.delete(key)
            return None

    async def _fetch_candles(self, chain: str, pool_address: str) -> list[Candle] | None:
        """Candles for the ATH lookup; None when history is unavailable."""
        if self._candles is None:
            return None
        try:
            return await self._candles.get_daily_candles(chain, pool_address)
        except (GeckoTerminalApiError, httpx.HTTPError, ValidationError) as e:
            logger.debug(f"[HISTORY] No candles for {chain}:{pool_address}: {e}")
            return None
