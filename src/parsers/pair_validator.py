"""Reduce a raw DexScreener pair list to pairs usable for one chain.

Checks run per pair: chain match, price sanity (with stablecoin rescaling),
liquidity floor. Sparse stablecoin pools get their missing fields backfilled
from static defaults; if every stablecoin pool fails, a single synthetic pair
pinned to $1 stands in for them.
"""

from decimal import Decimal, InvalidOperation

from loguru import logger

from src.parsers.dexscreener.models import (
    DexScreenerLiquidity,
    DexScreenerPair,
    DexScreenerToken,
    DexScreenerTxns,
    DexScreenerTxnsByPeriod,
    DexScreenerVolume,
    ValidatedPair,
)
from src.parsers.market_constants import (
    PRICE_RANGES,
    STABLECOIN_DEFAULTS,
    STABLECOIN_PEG,
    SYNTHETIC_STABLECOIN_PRICE,
    chain_matches,
    is_stablecoin,
    liquidity_threshold,
)
from src.parsers.price_normalizer import normalize_price

NOTE_BACKFILLED = "stablecoin_backfilled"
NOTE_SYNTHETIC = "synthetic_stablecoin_defaults"
NOTE_LOW_LIQUIDITY = "liquidity_below_floor"


def parse_price(raw: str | None) -> Decimal | None:
    """Parse a price string. None for missing, non-numeric, NaN or infinite."""
    if raw is None:
        return None
    try:
        value = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite():
        return None
    return value


def _price_in_range(symbol: str, price: Decimal) -> bool:
    bounds = PRICE_RANGES.get(symbol)
    if bounds is None:
        return True
    low, high = bounds
    return low <= price <= high


def _backfill_stablecoin(pair: DexScreenerPair, symbol: str) -> tuple[dict, bool]:
    """Build field updates replacing only the *missing* values with defaults."""
    defaults = STABLECOIN_DEFAULTS.get(symbol)
    if defaults is None:
        return {}, False

    updates: dict = {}
    liquidity = pair.liquidity or DexScreenerLiquidity()
    if liquidity.usd is None:
        updates["liquidity"] = liquidity.model_copy(update={"usd": defaults["min_liquidity"]})

    volume = pair.volume or DexScreenerVolume()
    if volume.h24 is None:
        updates["volume"] = volume.model_copy(update={"h24": defaults["volume_24h"]})

    if pair.fdv is None:
        updates["fdv"] = defaults["fdv"]
    if pair.marketCap is None:
        updates["marketCap"] = defaults["market_cap"]

    txns = pair.txns or DexScreenerTxnsByPeriod()
    if txns.h24 is None or txns.h24.buys is None or txns.h24.sells is None:
        current = txns.h24 or DexScreenerTxns()
        updates["txns"] = txns.model_copy(update={
            "h24": DexScreenerTxns(
                buys=current.buys if current.buys is not None else defaults["buys_24h"],
                sells=current.sells if current.sells is not None else defaults["sells_24h"],
            )
        })

    return updates, bool(updates)


def _validate_pair(pair: DexScreenerPair, target_chain: str) -> ValidatedPair | None:
    """Run price, liquidity and backfill checks on one chain-matched pair."""
    symbol = pair.symbol
    stable = is_stablecoin(symbol)
    notes: list[str] = []

    price = parse_price(pair.priceUsd)
    if price is None:
        if not (stable and pair.priceUsd is None):
            logger.debug(f"[PAIRS] {pair.pairAddress} rejected: bad price {pair.priceUsd!r}")
            return None
        # Missing (not malformed) stablecoin quote: assume the peg.
        price = STABLECOIN_PEG
        notes.append(NOTE_BACKFILLED)
    elif price <= 0:
        logger.debug(f"[PAIRS] {pair.pairAddress} rejected: non-positive price {price}")
        return None

    if stable:
        price = normalize_price(price, symbol)

    if not _price_in_range(symbol, price):
        logger.debug(f"[PAIRS] {pair.pairAddress} rejected: {symbol} price {price} out of range")
        return None

    floor = liquidity_threshold(target_chain, stable)
    liquidity = pair.liquidity_usd
    if liquidity is None and not stable:
        logger.debug(f"[PAIRS] {pair.pairAddress} rejected: liquidity unknown")
        return None
    if liquidity is not None and liquidity < floor:
        logger.debug(
            f"[PAIRS] {pair.pairAddress} rejected: liquidity ${liquidity} < ${floor} "
            f"({'stable' if stable else 'general'} tier)"
        )
        return None

    updates: dict = {}
    if stable:
        updates, backfilled = _backfill_stablecoin(pair, symbol)
        if backfilled and NOTE_BACKFILLED not in notes:
            notes.append(NOTE_BACKFILLED)

    data = pair.model_copy(update=updates).model_dump()
    data["priceUsd"] = str(price)
    return ValidatedPair(
        **data,
        price=price,
        raw_price_usd=pair.priceUsd,
        backfilled=NOTE_BACKFILLED in notes,
        quality_notes=notes,
    )


def build_synthetic_stablecoin_pair(template: DexScreenerPair, target_chain: str) -> ValidatedPair:
    """Stand-in pair built entirely from static defaults, price pinned to $1."""
    symbol = template.symbol
    defaults = STABLECOIN_DEFAULTS[symbol]
    base = template.baseToken or DexScreenerToken()
    notes = [NOTE_SYNTHETIC]
    liquidity = template.liquidity_usd
    if liquidity is not None and liquidity < liquidity_threshold(target_chain, True):
        notes.append(NOTE_LOW_LIQUIDITY)
    return ValidatedPair(
        chainId=template.chainId,
        dexId=template.dexId,
        pairAddress=template.pairAddress,
        baseToken=DexScreenerToken(
            address=base.address,
            name=base.name or str(defaults["name"]),
            symbol=symbol,
        ),
        priceUsd=SYNTHETIC_STABLECOIN_PRICE,
        liquidity=DexScreenerLiquidity(usd=defaults["min_liquidity"]),
        volume=DexScreenerVolume(h24=defaults["volume_24h"]),
        fdv=defaults["fdv"],
        marketCap=defaults["market_cap"],
        txns=DexScreenerTxnsByPeriod(
            h24=DexScreenerTxns(buys=defaults["buys_24h"], sells=defaults["sells_24h"])
        ),
        price=Decimal(SYNTHETIC_STABLECOIN_PRICE),
        raw_price_usd=template.priceUsd,
        backfilled=True,
        synthetic=True,
        quality_notes=notes,
    )


def filter_valid_pairs(pairs: list[DexScreenerPair], target_chain: str) -> list[ValidatedPair]:
    """Return the pairs usable for ``target_chain``; never mutates the input."""
    target_chain = target_chain.lower()
    chain_pairs = [p for p in pairs if chain_matches(p.chainId, target_chain)]

    valid: list[ValidatedPair] = []
    for pair in chain_pairs:
        validated = _validate_pair(pair, target_chain)
        if validated is not None:
            valid.append(validated)

    if valid:
        logger.debug(
            f"[PAIRS] {target_chain}: {len(valid)}/{len(chain_pairs)} chain pairs valid "
            f"({len(pairs)} raw)"
        )
        return valid

    stable_pairs = [
        p for p in chain_pairs
        if is_stablecoin(p.symbol) and p.symbol in STABLECOIN_DEFAULTS
    ]
    if stable_pairs:
        logger.info(
            f"[PAIRS] {target_chain}: no valid pairs, using {stable_pairs[0].symbol} defaults"
        )
        return [build_synthetic_stablecoin_pair(stable_pairs[0], target_chain)]

    logger.debug(f"[PAIRS] {target_chain}: no valid pairs out of {len(pairs)} raw")
    return []
