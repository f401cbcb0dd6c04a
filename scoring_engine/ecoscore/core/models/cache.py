"""Records held by the cache service."""

from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, Field


class Confidence(str, Enum):
    """How much a cached score can be trusted."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class CacheEntry(BaseModel):
    """A cached score with its creation time in epoch milliseconds."""

    score: float = Field(ge=0.0, le=1.0)
    confidence: Confidence
    timestamp: int


class ErrorLogEntry(BaseModel):
    """A failure recorded for later inspection."""

    message: str
    context: Dict[str, Any] = Field(default_factory=dict)
    timestamp: int


class CacheStats(BaseModel):
    """Aggregate cache counters."""

    cache_size: int
    hit_rate: float
    error_rate: float
