"""
Health check endpoints.
"""

import time

from fastapi import APIRouter

from stockledger.application.dto.responses import ComponentHealthResponse, HealthResponse
from stockledger.config import get_settings

router = APIRouter(prefix="/api/health", tags=["health"])

# Track startup time
_start_time = time.time()


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check.

    Returns service status and uptime.
    """
    return HealthResponse(
        status="healthy",
        version=get_settings().app_version,
        uptime_seconds=time.time() - _start_time,
    )


@router.get("/db", response_model=HealthResponse)
async def db_health() -> HealthResponse:
    """
    Database health check.

    Tests SQLite connectivity, response time and pending migrations.
    """
    from stockledger.infrastructure.storage.sqlite import get_pool
    from stockledger.infrastructure.storage.sqlite.migrations import get_migration_status

    db_status = ComponentHealthResponse(name="sqlite", available=False)

    try:
        pool = await get_pool()
        start = time.time()
        available = await pool.ping()
        latency = (time.time() - start) * 1000

        migration_status = await get_migration_status(pool.db_path)
        pending = len(migration_status["pending_migrations"])

        db_status = ComponentHealthResponse(
            name=f"sqlite (schema {migration_status['current_version'] or 'none'})",
            available=available and pending == 0,
            latency_ms=latency,
            error=f"{pending} pending migration(s)" if pending else None,
        )

    except Exception as e:
        db_status = ComponentHealthResponse(
            name="sqlite",
            available=False,
            error=str(e),
        )

    return HealthResponse(
        status="healthy" if db_status.available else "unhealthy",
        version=get_settings().app_version,
        uptime_seconds=time.time() - _start_time,
        database=db_status,
    )
