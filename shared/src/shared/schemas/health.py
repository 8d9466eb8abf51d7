"""Health check response schema."""
from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response for /healthz and /readyz."""

    status: str  # "ok" | "degraded" | "unhealthy"
    service: str = ""
    checks: dict[str, str] = Field(default_factory=dict)
