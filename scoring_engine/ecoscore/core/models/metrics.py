"""Model and tracker metrics records."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TrainingRecord(BaseModel):
    """Outcome of one training run."""

    timestamp: int
    accuracy: float
    loss: float


class ModelMetrics(BaseModel):
    """Training-set size and latest accuracy of the served model."""

    data_points: int
    last_training: Optional[int] = None
    accuracy: float = 0.0


class MetricsSnapshot(BaseModel):
    """Aggregate prediction statistics kept by the metrics tracker."""

    model_config = ConfigDict(protected_namespaces=())

    model_version: str
    last_training_date: Optional[int] = None
    total_predictions: int = 0
    accuracy_score: float = 0.85
    confidence_threshold: float = 0.7
    data_points: int = 0
    training_history: List[TrainingRecord] = Field(default_factory=list)
