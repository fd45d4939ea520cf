"""Chain aliases, validation thresholds and stablecoin defaults.

Plain configuration data consumed by the pair validator and selector.
"""

from decimal import Decimal

SUPPORTED_CHAINS: tuple[str, ...] = (
    "ethereum",
    "base",
    "avalanche",
    "solana",
    "bsc",
    "arbitrum",
    "polygon",
    "optimism",
)

# DexScreener chainId must contain one of these (lower-cased substring match).
CHAIN_ALIASES: dict[str, tuple[str, ...]] = {
    "ethereum": ("ethereum", "eth"),
    "base": ("base", "8453"),
    "avalanche": ("avalanche", "avax", "43114"),
    "solana": ("solana", "sol"),
    "bsc": ("bsc", "bnb"),
    "arbitrum": ("arbitrum", "arb"),
    "polygon": ("polygon", "matic"),
    "optimism": ("optimism",),
}

# Chains DexScreener indexes that we deliberately never analyse.
IGNORED_CHAINS: tuple[str, ...] = ("pulsechain",)

STABLECOINS: frozenset[str] = frozenset({"USDT", "USDC", "DAI"})

# Factors tried in order when a stablecoin quote is off by a power of ten.
STABLECOIN_SCALE_FACTORS: tuple[Decimal, ...] = (
    Decimal("24000"),
    Decimal("1000000"),
    Decimal("100000000"),
)
STABLECOIN_RESCALE_BELOW = Decimal("0.1")
STABLECOIN_PEG_RANGE: tuple[Decimal, Decimal] = (Decimal("0.98"), Decimal("1.02"))
STABLECOIN_PEG = Decimal("1.0")
SYNTHETIC_STABLECOIN_PRICE = "1.0000"

# Expected USD range per symbol. Symbols not listed skip the range check.
PRICE_RANGES: dict[str, tuple[Decimal, Decimal]] = {
    "WETH": (Decimal("500"), Decimal("20000")),
    "ETH": (Decimal("500"), Decimal("20000")),
    "WBTC": (Decimal("5000"), Decimal("500000")),
    "SOL": (Decimal("5"), Decimal("2000")),
    "WSOL": (Decimal("5"), Decimal("2000")),
    "WAVAX": (Decimal("2"), Decimal("500")),
    "AVAX": (Decimal("2"), Decimal("500")),
    "WBNB": (Decimal("50"), Decimal("5000")),
    "USDT": (Decimal("0.9"), Decimal("1.1")),
    "USDC": (Decimal("0.9"), Decimal("1.1")),
    "DAI": (Decimal("0.9"), Decimal("1.1")),
}

# Minimum pool liquidity (USD) keyed by (chain, is_stablecoin).
# Stablecoin pools quote thinner per pool because depth sits elsewhere.
LIQUIDITY_THRESHOLDS: dict[tuple[str, bool], Decimal] = {
    ("ethereum", False): Decimal("10000"),
    ("ethereum", True): Decimal("1000"),
    ("base", False): Decimal("5000"),
    ("base", True): Decimal("1000"),
    ("avalanche", False): Decimal("5000"),
    ("avalanche", True): Decimal("1000"),
    ("solana", False): Decimal("5000"),
    ("solana", True): Decimal("1000"),
    ("bsc", False): Decimal("5000"),
    ("bsc", True): Decimal("1000"),
    ("arbitrum", False): Decimal("5000"),
    ("arbitrum", True): Decimal("1000"),
    ("polygon", False): Decimal("5000"),
    ("polygon", True): Decimal("1000"),
    ("optimism", False): Decimal("5000"),
    ("optimism", True): Decimal("1000"),
}
DEFAULT_LIQUIDITY_THRESHOLD: dict[bool, Decimal] = {
    False: Decimal("10000"),
    True: Decimal("1000"),
}

# Substituted when a stablecoin pool reports sparse data.
STABLECOIN_DEFAULTS: dict[str, dict[str, Decimal | int | str]] = {
    "USDT": {
        "name": "Tether USD",
        "market_cap": Decimal("110000000000"),
        "volume_24h": Decimal("50000000000"),
        "min_liquidity": Decimal("1000000"),
        "fdv": Decimal("110000000000"),
        "buys_24h": 10000,
        "sells_24h": 10000,
    },
    "USDC": {
        "name": "USD Coin",
        "market_cap": Decimal("40000000000"),
        "volume_24h": Decimal("8000000000"),
        "min_liquidity": Decimal("1000000"),
        "fdv": Decimal("40000000000"),
        "buys_24h": 8000,
        "sells_24h": 8000,
    },
    "DAI": {
        "name": "Dai Stablecoin",
        "market_cap": Decimal("5000000000"),
        "volume_24h": Decimal("300000000"),
        "min_liquidity": Decimal("500000"),
        "fdv": Decimal("5000000000"),
        "buys_24h": 2000,
        "sells_24h": 2000,
    },
}


def is_stablecoin(symbol: str | None) -> bool:
    return bool(symbol) and symbol.strip().upper() in STABLECOINS


def liquidity_threshold(chain: str, stablecoin: bool) -> Decimal:
    """Liquidity floor for a chain/tier, falling back to the generic table."""
    return LIQUIDITY_THRESHOLDS.get(
        (chain, stablecoin), DEFAULT_LIQUIDITY_THRESHOLD[stablecoin]
    )


def chain_matches(chain_id: str | None, target_chain: str) -> bool:
    """True if a reported chainId contains one of the target chain's aliases."""
    if not chain_id:
        return False
    reported = chain_id.lower()
    aliases = CHAIN_ALIASES.get(target_chain.lower(), (target_chain.lower(),))
    return any(alias in reported for alias in aliases)


def resolve_chain(chain_id: str | None) -> str | None:
    """Map a reported chainId onto a supported chain, or None."""
    if not chain_id:
        return None
    reported = chain_id.lower()
    if any(ignored in reported for ignored in IGNORED_CHAINS):
        return None
    for chain in SUPPORTED_CHAINS:
        if chain_matches(reported, chain):
            return chain
    return None
