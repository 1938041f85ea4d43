"""Response schemas shared by every route."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

API_VERSION = "0.1.0"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class HealthResponse(BaseModel):
    """Liveness probe body."""

    status: HealthStatus = Field(description="Current health status")
    timestamp: datetime = Field(default_factory=_utcnow, description="Check timestamp")
    version: str = Field(default=API_VERSION, description="API version")


class CheckResult(BaseModel):
    """Outcome of one readiness probe (database, schema...)."""

    name: str = Field(description="Probe name")
    healthy: bool
    latency_ms: float | None = Field(default=None, description="Probe duration in milliseconds")
    error: str | None = Field(default=None, description="Failure reason when unhealthy")


class ReadinessResponse(BaseModel):
    """Readiness probe body; unhealthy as soon as one check fails."""

    status: HealthStatus
    timestamp: datetime = Field(default_factory=_utcnow)
    checks: list[CheckResult] = Field(default_factory=list)

    @classmethod
    def from_checks(cls, checks: list[CheckResult]) -> "ReadinessResponse":
        healthy = all(check.healthy for check in checks)
        return cls(status=HealthStatus.HEALTHY if healthy else HealthStatus.UNHEALTHY, checks=checks)


class ErrorDetail(BaseModel):
    """One validation problem, shaped like a pydantic error entry."""

    loc: list[str | int] | None = Field(default=None, description="Path to the offending field")
    msg: str
    type: str = "error"

    @classmethod
    def from_dict(cls, detail: dict[str, Any]) -> "ErrorDetail":
        loc = detail.get("loc")
        return cls(
            loc=list(loc) if loc else None,
            msg=str(detail.get("msg", detail)),
            type=detail.get("type", "error"),
        )


class ErrorResponse(BaseModel):
    """Body of every error answered by the API.

    ``error`` is a stable machine-readable category (``invalid_payload``,
    ``malformed_notification``, ``request_too_large``, ``internal_error``...);
    ``message`` is meant for humans and may change.
    """

    error: str = Field(description="Error category")
    message: str = Field(description="Human-readable description")
    details: list[ErrorDetail] | None = None
    request_id: str | None = Field(default=None, description="X-Request-ID of the failed request")
    timestamp: datetime = Field(default_factory=_utcnow)

    @classmethod
    def build(
        cls,
        error_type: str,
        message: str,
        details: list[dict[str, Any]] | None = None,
        request_id: str | None = None,
    ) -> "ErrorResponse":
        """Create an ErrorResponse from raw error details.

        Args:
            error_type: Error category.
            message: Human-readable error description.
            details: Optional pydantic-style error dictionaries.
            request_id: Optional request ID for tracing.

        Returns:
            ErrorResponse: Formatted error body.
        """
        return cls(
            error=error_type,
            message=message,
            details=[ErrorDetail.from_dict(d) for d in details] if details else None,
            request_id=request_id,
        )
