"""Pydantic models for health and metrics API responses."""

from pydantic import BaseModel, ConfigDict, Field

from ecoscore.core.models import CacheStats, MetricsSnapshot, ModelMetrics


class HealthStatusResponse(BaseModel):
    """API response model for the health API endpoint."""

    model_config = ConfigDict(protected_namespaces=())

    status: str = Field(
        description="The status of the API.",
        examples=["healthy"],
    )
    model_state: str = Field(
        description="Lifecycle state of the scoring model.",
        examples=["ready"],
    )
    timestamp: str = Field(
        description="The current date and time as an ISO formated string.",
        examples=["2025-09-20T12:34:56.789012"],
    )


class MetricsResponse(BaseModel):
    """Model, cache and tracker statistics."""

    model: ModelMetrics
    cache: CacheStats
    tracker: MetricsSnapshot
