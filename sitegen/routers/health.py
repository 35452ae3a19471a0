# sitegen/routers/health.py
# Liveness and readiness endpoints for load balancers and uptime checks

import asyncio
import logging
import time
from typing import Dict

from fastapi import APIRouter, Response, status
from pydantic import BaseModel
from sqlalchemy import text

from sitegen.db.base import get_engine, get_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


class DatabaseCheck(BaseModel):
    healthy: bool
    latency_ms: float = 0.0
    message: str = ""


class HealthReport(BaseModel):
    status: str  # "ok" or "degraded"
    timestamp: float
    version: str = "1.0.0"
    checks: Dict[str, DatabaseCheck] = {}


async def check_database_health() -> DatabaseCheck:
    """Round-trip `SELECT 1` through the pooled engine."""
    started = time.perf_counter()

    def elapsed() -> float:
        return round((time.perf_counter() - started) * 1000, 2)

    try:
        async with get_session(operation="health check") as session:
            answer = await session.scalar(text("SELECT 1"))
    except asyncio.TimeoutError:
        return DatabaseCheck(healthy=False, latency_ms=elapsed(), message="Database connection timeout")
    except Exception as e:
        logger.error("Database health check failed: %s", e)
        return DatabaseCheck(healthy=False, latency_ms=elapsed(), message=f"Database error: {type(e).__name__}")

    if answer != 1:
        return DatabaseCheck(healthy=False, latency_ms=elapsed(), message="Unexpected answer to SELECT 1")
    return DatabaseCheck(healthy=True, latency_ms=elapsed(), message=get_engine().sync_engine.pool.status())


@router.get("/health", response_model=HealthReport)
async def health_check():
    """
    Liveness with a dependency report.
    Always 200 while the process serves requests; a database outage shows
    up as status "degraded" rather than a failure.
    """
    database = await check_database_health()
    return HealthReport(
        status="ok" if database.healthy else "degraded",
        timestamp=time.time(),
        checks={"database": database},
    )


@router.get("/health/live")
async def liveness_probe():
    """Process is up; no dependency checks."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_probe(response: Response):
    """
    Readiness probe.
    503 until the database answers, so traffic is only routed to
    instances that can serve it.
    """
    database = await check_database_health()
    if not database.healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "not_ready", "reason": database.message}
    return {"status": "ready"}
