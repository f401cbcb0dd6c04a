"""The aggregate analysis returned to callers."""

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field


class ScoreSource(str, Enum):
    """Where the overall score came from."""

    MODEL = "model"
    HEURISTIC = "heuristic"


class ProductMetrics(BaseModel):
    """Per-dimension sustainability estimates."""

    carbon_footprint: float = Field(description="Estimated kg CO2e.")
    recycled_materials: float
    sustainable_packaging: float
    manufacturing_impact: float
    energy_efficiency: float
    repairability: float


class Alternative(BaseModel):
    """A suggested greener product in the same category."""

    title: str
    url: str
    score: float
    price_range: Tuple[float, float]


class CertificationCheck(BaseModel):
    """A certification mentioned in the listing and whether it is recognised."""

    name: str
    verified: bool
    url: Optional[str] = None


class ProductAnalysis(BaseModel):
    """Full sustainability analysis of one product."""

    overall_score: float = Field(ge=0.0, le=1.0)
    metrics: ProductMetrics
    confidence: float = Field(ge=0.0, le=1.0)
    alternatives: List[Alternative] = Field(default_factory=list)
    certifications: List[CertificationCheck] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    timestamp: int
    source: ScoreSource = ScoreSource.MODEL
