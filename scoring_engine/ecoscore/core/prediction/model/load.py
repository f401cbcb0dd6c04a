"""Saving and loading model artifacts."""

import asyncio
import json
import logging
import os
from typing import Any, Dict, Optional

import torch

from ecoscore.core.interfaces.storage.model_store import IModelStore
from ecoscore.core.prediction.model.architecture import BoundedMultiLayerPerceptron
from ecoscore.core.prediction.services.predictor import TorchScoringModel

logger = logging.getLogger(__name__)


def build_model_from_meta(meta: Dict[str, Any], weights_path: str) -> TorchScoringModel:
    """Instantiate and hydrate the trained model using metadata."""
    input_dim = int(meta["input_dimension"])
    hidden = meta.get("hidden_sizes", [64, 32])
    dropout = meta.get("dropout", [0.2, 0.1])
    network = BoundedMultiLayerPerceptron(input_dim, hidden, dropout)
    state_dict = torch.load(weights_path, map_location="cpu")
    network.load_state_dict(state_dict)
    network.eval()
    return TorchScoringModel(
        hidden_layer_sizes=hidden,
        dropout_rates=dropout,
        epochs=int(meta["epochs"]),
        batch_size=int(meta["batch_size"]),
        learning_rate=float(meta["lr"]),
        validation_split=float(meta["validation_split"]),
        seed=int(meta["seed"]),
        input_dimension=input_dim,
        network=network,
    )


class TorchModelStore(IModelStore):
    """Stores ``<name>.pt`` weights and ``<name>.json`` metadata in a directory."""

    def __init__(self, directory: str, name: str) -> None:
        self.directory = directory
        self.name = name
        self.weights_path = os.path.join(directory, f"{name}.pt")
        self.meta_path = os.path.join(directory, f"{name}.json")

    def _save(self, model: TorchScoringModel) -> None:
        os.makedirs(self.directory, exist_ok=True)
        torch.save(model.network.state_dict(), self.weights_path)
        with open(self.meta_path, "w", encoding="utf-8") as handle:
            json.dump(model.metadata(), handle, indent=2)

    def _load(self) -> Optional[TorchScoringModel]:
        if not (os.path.isfile(self.weights_path) and os.path.isfile(self.meta_path)):
            return None
        with open(self.meta_path, "r", encoding="utf-8") as handle:
            meta = json.load(handle)
        return build_model_from_meta(meta, self.weights_path)

    async def save(self, model: TorchScoringModel) -> None:
        await asyncio.to_thread(self._save, model)
        logger.info("Saved model weights -> %s", self.weights_path)

    async def load(self) -> Optional[TorchScoringModel]:
        try:
            model = await asyncio.to_thread(self._load)
        except Exception:
            logger.warning("No usable saved model at %s", self.weights_path, exc_info=True)
            return None
        if model is None:
            logger.info("No saved model found at %s", self.weights_path)
        return model
