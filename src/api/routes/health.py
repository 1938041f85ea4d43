"""Liveness and readiness probes."""

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import APIRouter, Response, status

from src.core.database import check_database_connection, check_schema
from src.schemas.common import CheckResult, HealthResponse, HealthStatus, ReadinessResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


async def _run_check(name: str, probe: Callable[[], Awaitable[dict[str, Any]]]) -> CheckResult:
    start_time = time.perf_counter()
    result = await probe()
    latency_ms = round((time.perf_counter() - start_time) * 1000, 2)
    if not result["healthy"]:
        logger.warning("Readiness check %s failed: %s", name, result.get("error"))
    return CheckResult(name=name, healthy=result["healthy"], latency_ms=latency_ms, error=result.get("error"))


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness check",
    description="Answers as long as the process serves requests. Touches no dependency.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status=HealthStatus.HEALTHY)


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    responses={
        200: {"description": "Database reachable and schema present"},
        503: {"description": "Database unreachable or tables missing"},
    },
    summary="Readiness check",
    description="Checks the connection pool and the store tables the webhook writes to.",
)
async def readiness_check(response: Response) -> ReadinessResponse:
    """Report whether payment webhooks can be fulfilled right now.

    The schema check only runs once the database answered, since it would
    fail for the same reason.

    Args:
        response: FastAPI response object for setting status code.

    Returns:
        ReadinessResponse: One entry per check; 503 if any failed.
    """
    checks = [await _run_check("database", check_database_connection)]
    if checks[0].healthy:
        checks.append(await _run_check("schema", check_schema))

    readiness = ReadinessResponse.from_checks(checks)
    if readiness.status is HealthStatus.UNHEALTHY:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return readiness
