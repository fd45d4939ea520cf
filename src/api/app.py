"""FastAPI application factory for the status/analysis API."""

from __future__ import annotations

import os

from fastapi import FastAPI

from src.api.routers.health import VERSION


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    app = FastAPI(
        title="Token Analytics API",
        version=VERSION,
        docs_url="/api/docs" if os.getenv("API_DEBUG") else None,
        redoc_url=None,
        openapi_url="/api/openapi.json" if os.getenv("API_DEBUG") else None,
    )

    from src.api.routers.health import router as health_router
    from src.api.routers.tokens import router as tokens_router

    app.include_router(health_router)
    app.include_router(tokens_router)
    return app
