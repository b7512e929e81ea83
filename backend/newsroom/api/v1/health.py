"""
Health check endpoints for monitoring and readiness probes.

- Liveness probe: /health (is the process serving requests)
- Readiness probe: /health/ready (can the database be reached)
"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Response, status

from newsroom.core.database import check_database
from newsroom.schemas.health import HealthCheckDetail, HealthResponse, ReadinessResponse

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
)
async def health_check() -> HealthResponse:
    """
    Basic liveness probe. Always 200 while the application is running.

    Example response:
        {"status": "ok", "timestamp": "2025-11-24T10:30:00.123456+00:00"}
    """
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc))


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
)
async def readiness_check(response: Response) -> ReadinessResponse:
    """
    Readiness probe with a database round trip.

    Returns 200 when the database answers, 503 otherwise.

    Example response (unhealthy):
        {
            "status": "not_ready",
            "checks": {"db": {"healthy": false, "latency_ms": 2001.3,
                              "error": "Database connection failed or timed out"}},
            "timestamp": "2025-11-24T10:30:00.123456+00:00"
        }
    """
    db_start = time.perf_counter()
    db_healthy = await check_database()
    db_latency = (time.perf_counter() - db_start) * 1000

    checks = {
        "db": HealthCheckDetail(
            healthy=db_healthy,
            latency_ms=round(db_latency, 2),
            error=None if db_healthy else "Database connection failed or timed out",
        ),
    }

    all_healthy = all(check.healthy for check in checks.values())
    if not all_healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadinessResponse(
        status="ready" if all_healthy else "not_ready",
        checks=checks,
        timestamp=datetime.now(timezone.utc),
    )
