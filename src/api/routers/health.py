"""Service status and health, no auth required."""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from loguru import logger
from pydantic import BaseModel
from redis.exceptions import RedisError

from src.api.dependencies import get_registry
from src.api.registry import ServiceRegistry

VERSION = "0.1.0"

router = APIRouter(tags=["health"])


class StatusResponse(BaseModel):
    status: str
    message: str
    timestamp: datetime


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_sec: int
    analyzer_ready: bool
    redis_ok: bool | None  # None when Redis is not configured


@router.get("/", response_model=StatusResponse)
async def root() -> StatusResponse:
    return StatusResponse(
        status="online",
        message="Token analytics bot server",
        timestamp=datetime.now(UTC),
    )


@router.get("/api/v1/health", response_model=HealthResponse)
async def health_check(reg: ServiceRegistry = Depends(get_registry)) -> HealthResponse:
    """Check analyzer wiring and Redis connectivity."""
    redis_ok: bool | None = None
    if reg.redis is not None:
        try:
            await reg.redis.ping()
            redis_ok = True
        except (RedisError, OSError) as e:
            logger.warning(f"[API] Redis ping failed: {e}")
            redis_ok = False

    ready = reg.token_analyzer is not None
    return HealthResponse(
        status="ok" if ready and redis_ok is not False else "degraded",
        version=VERSION,
        uptime_sec=reg.uptime_sec,
        analyzer_ready=ready,
        redis_ok=redis_ok,
    )
