"""Wallet transaction sources.

There is no on-chain indexer yet: recorded fills live in process memory and
wallets without records get a deterministic simulated history around the
current price, so the same wallet/token always yields the same report.
"""

import hashlib
import random
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Protocol

from loguru import logger

from src.models.transaction import TradeSide, Transaction


class TransactionSource(Protocol):
    async def get_transactions(
        self,
        wallet_address: str,
        token_contract: str,
        chain: str,
        *,
        reference_price: Decimal | None = None,
    ) -> list[Transaction]: ...


def _address_key(address: str) -> str:
    # EVM hex addresses are case-insensitive; base58 (Solana) is not.
    return address.lower() if address.startswith("0x") else address


class TransactionStore:
    """In-memory fill store, oldest first on read."""

    def __init__(self) -> None:
        self._fills: dict[tuple[str, str], list[Transaction]] = {}

    def add(self, tx: Transaction) -> None:
        key = (_address_key(tx.wallet_address), _address_key(tx.token_contract))
        self._fills.setdefault(key, []).append(tx)

    def get(self, wallet_address: str, token_contract: str) -> list[Transaction]:
        key = (_address_key(wallet_address), _address_key(token_contract))
        return sorted(self._fills.get(key, []), key=lambda t: t.timestamp)


class SimulatedTransactionSource:
    """Recorded fills when present, otherwise a seeded synthetic history."""

    def __init__(
        self,
        store: TransactionStore | None = None,
        *,
        simulate: bool = True,
        history_days: int = 90,
    ) -> None:
        self._store = store or TransactionStore()
        self._simulate = simulate
        self._history_days = history_days

    @property
    def store(self) -> TransactionStore:
        return self._store

    async def get_transactions(
        self,
        wallet_address: str,
        token_contract: str,
        chain: str,
        *,
        reference_price: Decimal | None = None,
    ) -> list[Transaction]:
        recorded = self._store.get(wallet_address, token_contract)
        if recorded or not self._simulate:
            return recorded
        if reference_price is None or reference_price <= 0:
            return []
        return self.simulate(wallet_address, token_contract, chain, reference_price)

    def simulate(
        self,
        wallet_address: str,
        token_contract: str,
        chain: str,
        reference_price: Decimal,
        now: datetime | None = None,
    ) -> list[Transaction]:
        """Seeded buy/sell sequence that never sells more than it holds."""
        seed_src = f"{_address_key(wallet_address)}:{_address_key(token_contract)}"
        rng = random.Random(int(hashlib.sha256(seed_src.encode()).hexdigest()[:16], 16))
        now = now or datetime.now(UTC)

        count = rng.randint(3, 12)
        start = now - timedelta(days=self._history_days)
        step = timedelta(days=self._history_days) / (count + 1)

        fills: list[Transaction] = []
        holdings = Decimal(0)
        for i in range(count):
            price = (reference_price * Decimal(str(round(rng.uniform(0.6, 1.4), 4)))).normalize()
            sell = i > 0 and holdings > 0 and rng.random() < 0.4
            if sell:
                amount = (holdings * Decimal(str(round(rng.uniform(0.1, 0.6), 2)))).quantize(
                    Decimal("0.0001")
                )
                holdings -= amount
            else:
                amount = Decimal(rng.randint(10, 5000))
                holdings += amount
            fills.append(
                Transaction(
                    wallet_address=wallet_address,
                    token_contract=token_contract,
                    side=TradeSide.SELL if sell else TradeSide.BUY,
                    amount=amount,
                    price_usd=price,
                    timestamp=start + step * (i + 1),
                    chain=chain,
                )
            )

        logger.debug(f"[PNL] Simulated {len(fills)} fills for {wallet_address[:10]} on {chain}")
        return fills
