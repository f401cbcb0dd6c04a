"""Scoring model interface definitions."""

from abc import ABC, abstractmethod
from typing import Dict, List, NamedTuple, Optional

from ecoscore.core.models import FeatureVector, TrainingSample


class FitResult(NamedTuple):
    """Final metrics of a training run, with per-epoch curves when available."""

    accuracy: float
    loss: float
    history: Optional[Dict[str, List[float]]] = None


class IScoringModel(ABC):
    """Interface for trainable sustainability models.

    Both methods are synchronous and may block; callers run them off the
    event loop.
    """

    @abstractmethod
    def predict_score(self, features: FeatureVector) -> float:
        """Return a sustainability score in [0, 1] for a single product."""
        raise NotImplementedError

    @abstractmethod
    def fit(self, samples: List[TrainingSample]) -> FitResult:
        """Train on the given samples and return validation metrics."""
        raise NotImplementedError
