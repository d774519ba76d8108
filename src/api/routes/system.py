"""System health endpoints.

Endpoints:
- /health  Lightweight liveness probe (no dependency checks)
- /ready   Readiness probe (checks the database)
"""

import asyncio
import logging
import time
from datetime import UTC, datetime

from fastapi import APIRouter, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from src import __version__
from src.api.schemas import ComponentHealth, HealthResponse, HealthStatus
from src.settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()

_HEALTH_CHECK_TIMEOUT_S = 5.0


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check (Liveness)",
)
async def health_check() -> HealthResponse:
    """Return healthy while the process is serving requests.

    Does NOT check dependencies; use /ready for readiness probes.
    """
    return HealthResponse(
        status=HealthStatus.HEALTHY,
        timestamp=datetime.now(UTC),
        version=__version__,
    )


@router.get(
    "/ready",
    response_model=HealthResponse,
    summary="Readiness Probe",
    description="Verifies the database is reachable. Returns 503 if not ready.",
)
async def readiness_check() -> HealthResponse:
    db_health = await _check_database()
    if db_health.status == HealthStatus.UNHEALTHY:
        raise HTTPException(status_code=503, detail="Not ready: database unavailable")
    return HealthResponse(
        status=HealthStatus.HEALTHY,
        timestamp=datetime.now(UTC),
        version=__version__,
        components=[db_health],
    )


async def _check_database() -> ComponentHealth:
    """Check database connectivity with timeout."""
    start = time.perf_counter()

    from src.storage import get_session

    async def _ping_db() -> None:
        async with get_session() as session:
            await session.execute(text("SELECT 1"))

    try:
        await asyncio.wait_for(_ping_db(), timeout=_HEALTH_CHECK_TIMEOUT_S)
    except TimeoutError:
        logger.error("Database health check timed out after %.1fs", _HEALTH_CHECK_TIMEOUT_S)
        return ComponentHealth(
            name="database",
            status=HealthStatus.UNHEALTHY,
            message="Database health check timed out",
            latency_ms=(time.perf_counter() - start) * 1000,
        )
    except (SQLAlchemyError, OSError) as e:
        logger.error("Database health check failed: %s", e, exc_info=True)
        message = f"Database error: {e!s}" if get_settings().debug else "Database unavailable"
        return ComponentHealth(
            name="database",
            status=HealthStatus.UNHEALTHY,
            message=message,
            latency_ms=(time.perf_counter() - start) * 1000,
        )

    return ComponentHealth(
        name="database",
        status=HealthStatus.HEALTHY,
        message="PostgreSQL connected",
        latency_ms=(time.perf_counter() - start) * 1000,
    )
