import logging
import time
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text

from leave_tracker.config import get_settings
from leave_tracker.db import SessionDep

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Liveness of the API and reachability of its database."""

    status: Literal["ok", "degraded"]
    database: Literal["ok", "unreachable"]
    database_latency_ms: float | None = None
    version: str
    environment: str


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep) -> HealthResponse:
    """Report service health. Answers 200 even when the database is down."""
    settings = get_settings()
    latency_ms: float | None = None

    started = time.perf_counter()
    try:
        await session.execute(text("SELECT 1"))
        latency_ms = round((time.perf_counter() - started) * 1000, 2)
    except Exception:
        logger.exception("Health check: database connectivity failed")

    reachable = latency_ms is not None
    return HealthResponse(
        status="ok" if reachable else "degraded",
        database="ok" if reachable else "unreachable",
        database_latency_ms=latency_ms,
        version=settings.app_version,
        environment=settings.environment,
    )
