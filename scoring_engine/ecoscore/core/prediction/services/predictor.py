"""Concrete torch-backed sustainability model."""

import copy
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import torch

from ecoscore.core.interfaces.services.scoring_model import FitResult, IScoringModel
from ecoscore.core.models import FeatureVector, TrainingSample
from ecoscore.core.prediction.model.architecture import BoundedMultiLayerPerceptron
from ecoscore.core.prediction.model.feature_pipeline import (
    INPUT_DIMENSION,
    vectorize,
    vectorize_batch,
)
from ecoscore.core.prediction.model.train import fit_network
from ecoscore.settings import Settings


class TorchScoringModel(IScoringModel):
    """Wraps a :class:`BoundedMultiLayerPerceptron` behind the scoring interface.

    ``fit`` trains a copy of the network and swaps it in when finished, so
    concurrent ``predict_score`` calls always see a complete set of weights.
    """

    def __init__(
        self,
        hidden_layer_sizes: Sequence[int],
        dropout_rates: Sequence[float],
        epochs: int,
        batch_size: int,
        learning_rate: float,
        validation_split: float,
        seed: int,
        input_dimension: int = INPUT_DIMENSION,
        network: Optional[BoundedMultiLayerPerceptron] = None,
    ) -> None:
        self.input_dimension = input_dimension
        self.hidden_layer_sizes = list(hidden_layer_sizes)
        self.dropout_rates = list(dropout_rates)
        self.epochs = epochs
        self.batch_size = batch_size
        self.learning_rate = learning_rate
        self.validation_split = validation_split
        self.seed = seed
        self.network = network or BoundedMultiLayerPerceptron(
            input_dimension, self.hidden_layer_sizes, self.dropout_rates
        )
        self.network.eval()

    @classmethod
    def from_settings(cls, config: Settings) -> "TorchScoringModel":
        return cls(
            hidden_layer_sizes=config.hidden_layer_sizes,
            dropout_rates=config.dropout_rates,
            epochs=config.training_epochs,
            batch_size=config.training_batch_size,
            learning_rate=config.learning_rate,
            validation_split=config.training_validation_split,
            seed=config.random_seed,
        )

    def predict_score(self, features: FeatureVector) -> float:
        network = self.network
        tensor = torch.from_numpy(vectorize(features).astype(np.float32))
        with torch.no_grad():
            score = float(network(tensor).item())
        return max(0.0, min(1.0, score))

    def fit(self, samples: List[TrainingSample]) -> FitResult:
        candidate = copy.deepcopy(self.network)
        features = vectorize_batch([sample.features for sample in samples])
        targets = np.array([sample.label for sample in samples], dtype=np.float32)
        outcome = fit_network(
            candidate,
            features,
            targets,
            epochs=self.epochs,
            batch_size=self.batch_size,
            learning_rate=self.learning_rate,
            validation_split=self.validation_split,
            seed=self.seed,
        )
        self.network = candidate
        return FitResult(accuracy=outcome.accuracy, loss=outcome.loss, history=outcome.history)

    def metadata(self) -> Dict[str, Any]:
        """Architecture and training parameters needed to rebuild the model."""
        return {
            "input_dimension": self.input_dimension,
            "hidden_sizes": self.hidden_layer_sizes,
            "dropout": self.dropout_rates,
            "epochs": self.epochs,
            "batch_size": self.batch_size,
            "lr": self.learning_rate,
            "validation_split": self.validation_split,
            "seed": self.seed,
        }
