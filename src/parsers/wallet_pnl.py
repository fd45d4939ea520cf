"""Wallet P&L: blended average-cost accounting over a list of fills.

Sold units are valued at the overall average buy price, not lot by lot
(no FIFO). realized = sold_value - sold_qty * avg_buy;
unrealized = holdings * (current_price - avg_buy).
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from loguru import logger

from src.models.analysis import TokenAnalysis
from src.models.transaction import PnLResult, TradeSide, Transaction
from src.parsers.token_analysis import TokenAnalyzer
from src.parsers.transactions import TransactionSource

WARN_NEGATIVE_HOLDINGS = "negative_holdings"
WARN_SKIPPED = "skipped_malformed_transactions"

ZERO = Decimal(0)


def _to_decimal(value: object) -> Decimal | None:
    """Finite Decimal or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return result if result.is_finite() else None


def _to_side(value: TradeSide | str) -> TradeSide | None:
    try:
        return TradeSide(str(getattr(value, "value", value)).lower())
    except ValueError:
        return None


def compute_pnl(
    transactions: list[Transaction],
    current_price: Decimal | float | None,
) -> PnLResult | None:
    """Aggregate fills into cost basis and P&L.

    Returns None for no transactions, no current price, or no parsable fill.
    A malformed fill is skipped without affecting the others.
    """
    if not transactions or current_price is None:
        return None
    price_now = _to_decimal(current_price)
    if price_now is None:
        return None

    total_bought = total_sold = ZERO
    bought_value = sold_value = ZERO
    buy_count = sell_count = skipped = 0

    for tx in transactions:
        side = _to_side(tx.side)
        amount = _to_decimal(tx.amount)
        price = _to_decimal(tx.price_usd)
        if side is None or amount is None or price is None or amount < 0 or price < 0:
            skipped += 1
            logger.debug(
                f"[PNL] Skipping malformed fill {tx.side!r} {tx.amount!r} @ {tx.price_usd!r}"
            )
            continue

        if side is TradeSide.BUY:
            total_bought += amount
            bought_value += amount * price
            buy_count += 1
        else:
            total_sold += amount
            sold_value += amount * price
            sell_count += 1

    if buy_count + sell_count == 0:
        return None

    avg_buy = bought_value / total_bought if total_bought > 0 else ZERO
    avg_sell = sold_value / total_sold if total_sold > 0 else ZERO
    holdings = total_bought - total_sold

    realized = sold_value - total_sold * avg_buy
    unrealized = holdings * (price_now - avg_buy)

    warnings: list[str] = []
    if holdings < 0:
        warnings.append(WARN_NEGATIVE_HOLDINGS)
        logger.warning(
            f"[PNL] Sold {total_sold} > bought {total_bought}: transaction feed inconsistent"
        )
    if skipped:
        warnings.append(WARN_SKIPPED)

    return PnLResult(
        total_bought=total_bought,
        total_sold=total_sold,
        total_bought_value=bought_value,
        total_sold_value=sold_value,
        average_buy_price=avg_buy,
        average_sell_price=avg_sell,
        current_holdings=holdings,
        current_price=price_now,
        realized_pnl=realized,
        unrealized_pnl=unrealized,
        buy_count=buy_count,
        sell_count=sell_count,
        skipped_count=skipped,
        warnings=warnings,
    )


@dataclass
class WalletReport:
    chain: str
    analysis: TokenAnalysis
    pnl: PnLResult


class WalletPnLAnalyzer:
    """Chain detection -> live price -> wallet history -> compute_pnl."""

    def __init__(
        self, token_analyzer: TokenAnalyzer, transaction_source: TransactionSource
    ) -> None:
        self._analyzer = token_analyzer
        self._transactions = transaction_source

    async def analyze(
        self, wallet_address: str, token_contract: str, chain: str | None = None
    ) -> WalletReport | None:
        chain = chain or await self._analyzer.detect_chain(token_contract)
        if chain is None:
            return None

        analysis = await self._analyzer.build_analysis(token_contract, chain)
        if analysis is None:
            logger.info(f"[PNL] No live price for {token_contract} on {chain}")
            return None

        transactions = await self._transactions.get_transactions(
            wallet_address, token_contract, chain, reference_price=analysis.price_usd
        )
        pnl = compute_pnl(transactions, analysis.price_usd)
        if pnl is None:
            logger.info(f"[PNL] No usable fills for {wallet_address} / {token_contract}")
            return None

        logger.info(
            f"[PNL] {wallet_address[:10]} {analysis.symbol}: "
            f"{pnl.buy_count} buys, {pnl.sell_count} sells, total ${pnl.total_pnl:.2f}"
        )
        return WalletReport(chain=chain, analysis=analysis, pnl=pnl)
