"""GET /health - Check health of all services."""

from datetime import UTC, datetime

from fastapi import Depends
from pydantic import BaseModel, Field

from config import get_settings
from db import FirestoreService
from dependencies import get_firestore_service
from llm import list_providers

# --- Response Schemas ---


class ServiceStatus(BaseModel):
    """Status of an individual service."""

    name: str
    status: str = Field(..., description="healthy, degraded, or unhealthy")
    latency_ms: float | None = Field(None, description="Response time in ms")
    error: str | None = Field(None, description="Error message if unhealthy")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status: healthy, degraded, unhealthy")
    version: str = Field(..., description="Application version")
    environment: str = Field(..., description="Environment name")
    providers: list[str] = Field(..., description="Registered provider IDs")
    services: list[ServiceStatus] = Field(
        ..., description="Individual service statuses"
    )
    timestamp: datetime


# --- Handler ---


async def check_health(
    firestore_service: FirestoreService = Depends(get_firestore_service),
) -> HealthResponse:
    """Check the assistant store and report the provider catalog."""
    settings = get_settings()

    firestore_health = await firestore_service.health_check()

    services = [
        ServiceStatus(
            name="firestore",
            status=firestore_health["status"],
            latency_ms=firestore_health.get("latency_ms"),
            error=firestore_health.get("error"),
        ),
    ]

    statuses = [s.status for s in services]
    if all(s == "healthy" for s in statuses):
        overall = "healthy"
    elif any(s == "unhealthy" for s in statuses):
        overall = "unhealthy"
    else:
        overall = "degraded"

    return HealthResponse(
        status=overall,
        version="0.1.0",
        environment=settings.environment,
        providers=[provider.id for provider in list_providers()],
        services=services,
        timestamp=datetime.now(UTC),
    )
