"""FastAPI dependency injection: registry, analyzers and the fill store."""

from __future__ import annotations

from fastapi import HTTPException, status

from src.api.registry import ServiceRegistry, registry
from src.parsers.token_analysis import TokenAnalyzer
from src.parsers.transactions import TransactionStore
from src.parsers.wallet_pnl import WalletPnLAnalyzer


def get_registry() -> ServiceRegistry:
    """Return the global service registry."""
    return registry


def get_token_analyzer() -> TokenAnalyzer:
    if registry.token_analyzer is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Analyzer not ready",
        )
    return registry.token_analyzer


def get_wallet_analyzer() -> WalletPnLAnalyzer:
    if registry.wallet_analyzer is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Analyzer not ready",
        )
    return registry.wallet_analyzer


def get_transaction_store() -> TransactionStore:
    if registry.transaction_store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Transaction store not ready",
        )
    return registry.transaction_store
