"""Common Pydantic schemas for API requests and responses.

Provides reusable schema definitions for consistent
API responses across all endpoints.
"""

from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from src.api.schemas.devices import DeviceListResponse, ScorePreviewResponse, TagListResponse
from src.api.schemas.planner import (
    GatewayReportResponse,
    OwnershipResponse,
    ShoppingListResponse,
)


class ErrorDetail(BaseModel):
    """Detailed error information."""

    code: int = Field(..., description="HTTP status code")
    message: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Error type classification")
    correlation_id: str | None = None
    quota: dict[str, Any] | None = Field(
        default=None,
        description="Owned/used counts when an owned quota was exceeded",
    )


class ErrorResponse(BaseModel):
    """Standard error response wrapper."""

    error: ErrorDetail


class HealthStatus(StrEnum):
    """Health check status values."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    """Health status for a single component."""

    name: str = Field(..., description="Component name")
    status: HealthStatus = Field(..., description="Component health status")
    message: str | None = Field(default=None, description="Additional status message")
    latency_ms: float | None = Field(
        default=None,
        description="Component response latency in milliseconds",
    )


class HealthResponse(BaseModel):
    """Health check response."""

    status: HealthStatus = Field(..., description="Overall system health")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Health check timestamp",
    )
    version: str = Field(default="0.1.0", description="Application version")
    components: list[ComponentHealth] = Field(default_factory=list)


class MessageResponse(BaseModel):
    """Simple message response."""

    message: str = Field(..., description="Response message")


__all__ = [
    # Errors
    "ErrorDetail",
    "ErrorResponse",
    # Health
    "HealthStatus",
    "ComponentHealth",
    "HealthResponse",
    "MessageResponse",
    # Devices
    "DeviceListResponse",
    "ScorePreviewResponse",
    "TagListResponse",
    # Planner views
    "GatewayReportResponse",
    "OwnershipResponse",
    "ShoppingListResponse",
]
