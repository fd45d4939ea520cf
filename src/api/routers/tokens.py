"""Token analysis, wallet P&L and fill recording as JSON."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger
from pydantic import BaseModel, Field

from src.api.dependencies import get_token_analyzer, get_transaction_store, get_wallet_analyzer
from src.bot.validators import is_valid_address
from src.models.analysis import TokenAnalysis
from src.models.transaction import TradeSide, Transaction
from src.parsers.market_constants import SUPPORTED_CHAINS
from src.parsers.token_analysis import TokenAnalyzer
from src.parsers.transactions import TransactionStore
from src.parsers.wallet_pnl import WalletPnLAnalyzer

router = APIRouter(prefix="/api/v1", tags=["tokens"])


class WalletPnLResponse(BaseModel):
    chain: str
    symbol: str
    current_price: Decimal
    total_bought: Decimal
    total_sold: Decimal
    average_buy_price: Decimal
    average_sell_price: Decimal
    current_holdings: Decimal
    realized_pnl: Decimal
    unrealized_pnl: Decimal
    total_pnl: Decimal
    buy_count: int
    sell_count: int
    warnings: list[str]


class FillRequest(BaseModel):
    token: str
    chain: str
    side: TradeSide
    amount: Decimal = Field(gt=0)
    price_usd: Decimal = Field(ge=0)
    timestamp: datetime | None = None  # defaults to receipt time


class FillRecorded(BaseModel):
    wallet: str
    token: str
    recorded: int  # fills now stored for this wallet/token


def _check_address(address: str) -> None:
    if not is_valid_address(address):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid address: {address[:64]}",
        )


@router.get("/tokens/{chain}/{address}", response_model=TokenAnalysis)
async def get_token_analysis(
    chain: str,
    address: str,
    analyzer: TokenAnalyzer = Depends(get_token_analyzer),
) -> TokenAnalysis:
    if chain.lower() not in SUPPORTED_CHAINS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unsupported chain")
    _check_address(address)

    analysis = await analyzer.build_analysis(address, chain)
    if analysis is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No market data")
    return analysis


@router.get("/wallets/{wallet}/pnl", response_model=WalletPnLResponse)
async def get_wallet_pnl(
    wallet: str,
    token: str = Query(..., description="Token contract address"),
    analyzer: WalletPnLAnalyzer = Depends(get_wallet_analyzer),
) -> WalletPnLResponse:
    _check_address(wallet)
    _check_address(token)

    report = await analyzer.analyze(wallet, token)
    if report is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No data")

    pnl = report.pnl
    return WalletPnLResponse(
        chain=report.chain,
        symbol=report.analysis.symbol,
        current_price=pnl.current_price,
        total_bought=pnl.total_bought,
        total_sold=pnl.total_sold,
        average_buy_price=pnl.average_buy_price,
        average_sell_price=pnl.average_sell_price,
        current_holdings=pnl.current_holdings,
        realized_pnl=pnl.realized_pnl,
        unrealized_pnl=pnl.unrealized_pnl,
        total_pnl=pnl.total_pnl,
        buy_count=pnl.buy_count,
        sell_count=pnl.sell_count,
        warnings=pnl.warnings,
    )


@router.post(
    "/wallets/{wallet}/transactions",
    response_model=FillRecorded,
    status_code=status.HTTP_201_CREATED,
)
async def record_fill(
    wallet: str,
    fill: FillRequest,
    store: TransactionStore = Depends(get_transaction_store),
) -> FillRecorded:
    """Record one buy/sell fill; later P&L reports use recorded fills."""
    _check_address(wallet)
    _check_address(fill.token)
    chain = fill.chain.lower()
    if chain not in SUPPORTED_CHAINS:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unsupported chain: {fill.chain[:32]}",
        )

    store.add(
        Transaction(
            wallet_address=wallet,
            token_contract=fill.token,
            side=fill.side,
            amount=fill.amount,
            price_usd=fill.price_usd,
            timestamp=fill.timestamp or datetime.now(UTC),
            chain=chain,
        )
    )
    recorded = len(store.get(wallet, fill.token))
    logger.info(f"[API] Recorded {fill.side.value} {fill.amount} of {fill.token} for {wallet}")
    return FillRecorded(wallet=wallet, token=fill.token, recorded=recorded)
