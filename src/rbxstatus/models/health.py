"""Health check data models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class HealthStatus(str, Enum):
    """Health status values."""

    HEALTHY = "healthy"


class HealthResponse(BaseModel):
    """Liveness response model."""

    model_config = ConfigDict(use_enum_values=True)

    status: HealthStatus
    uptime: int
    timestamp: datetime
    version: str
    environment: str
    cache: str


class ReadinessResponse(BaseModel):
    """Readiness response model."""

    ready: bool
