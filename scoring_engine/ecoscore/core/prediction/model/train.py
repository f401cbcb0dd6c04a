"""Fit the bounded MLP on labeled sustainability samples."""

import logging
import math
import random
from typing import Dict, List, NamedTuple, Tuple

import numpy as np
import torch
from torch import nn
from torch.utils.data import DataLoader, Dataset
from sklearn.model_selection import train_test_split

from ecoscore.core.prediction.model.architecture import BoundedMultiLayerPerceptron

logger = logging.getLogger(__name__)

BINARY_THRESHOLD = 0.5


class TrainingOutcome(NamedTuple):
    """Final epoch metrics plus per-epoch loss curves."""

    accuracy: float
    loss: float
    history: Dict[str, List[float]]


# -----------------------------
# Utility Functions
# -----------------------------
def set_random_seed(seed: int) -> None:
    """Set random seeds for reproducible results across all libraries."""
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)


class TrainingDataset(Dataset):
    """PyTorch dataset wrapper for numpy feature and target arrays."""

    def __init__(self, features: np.ndarray, targets: np.ndarray):
        self.features = torch.from_numpy(features).float()
        self.targets = torch.from_numpy(targets).float().view(-1, 1)

    def __len__(self) -> int:
        return self.features.shape[0]

    def __getitem__(self, index: int) -> Tuple[torch.Tensor, torch.Tensor]:
        return self.features[index], self.targets[index]


# -----------------------------
# Training and Evaluation Functions
# -----------------------------
def run_training_epoch(model, data_loader, loss_criterion, optimizer=None):
    """Run one epoch of training or validation; returns (loss, accuracy)."""
    is_training = optimizer is not None
    model.train(mode=is_training)

    total_loss = 0.0
    total_correct = 0
    total_samples = 0

    for feature_batch, target_batch in data_loader:
        with torch.set_grad_enabled(is_training):
            predictions = model(feature_batch)
            loss = loss_criterion(predictions, target_batch)

        if is_training:
            optimizer.zero_grad()
            loss.backward()
            optimizer.step()

        batch_size = target_batch.size(0)
        total_loss += float(loss.detach()) * batch_size
        total_correct += int(
            (
                (predictions.detach() >= BINARY_THRESHOLD)
                == (target_batch >= BINARY_THRESHOLD)
            ).sum()
        )
        total_samples += batch_size

    denominator = max(total_samples, 1)
    return total_loss / denominator, total_correct / denominator


def split_for_validation(
    features: np.ndarray, targets: np.ndarray, validation_split: float, seed: int
):
    """Hold out a validation slice; tiny sets validate on the training data."""
    if len(features) < 2 or validation_split <= 0:
        return features, features, targets, targets
    return train_test_split(
        features,
        targets,
        test_size=validation_split,
        random_state=seed,
        shuffle=True,
    )


def fit_network(
    model: BoundedMultiLayerPerceptron,
    features: np.ndarray,
    targets: np.ndarray,
    epochs: int,
    batch_size: int,
    learning_rate: float,
    validation_split: float,
    seed: int,
) -> TrainingOutcome:
    """Train ``model`` in place and report the last epoch's validation metrics."""
    train_x, val_x, train_y, val_y = split_for_validation(
        features.astype(np.float32), targets.astype(np.float32), validation_split, seed
    )
    generator = torch.Generator().manual_seed(seed)
    train_loader = DataLoader(
        TrainingDataset(train_x, train_y),
        batch_size=batch_size,
        shuffle=True,
        generator=generator,
    )
    val_loader = DataLoader(
        TrainingDataset(val_x, val_y), batch_size=batch_size, shuffle=False
    )

    optimizer = torch.optim.Adam(model.parameters(), lr=learning_rate)
    criterion = nn.BCELoss()
    history: Dict[str, List[float]] = {"train": [], "val": [], "val_accuracy": []}
    val_loss, val_accuracy = math.inf, 0.0

    for epoch in range(1, epochs + 1):
        train_loss, _ = run_training_epoch(model, train_loader, criterion, optimizer)
        val_loss, val_accuracy = run_training_epoch(model, val_loader, criterion)
        history["train"].append(train_loss)
        history["val"].append(val_loss)
        history["val_accuracy"].append(val_accuracy)
        logger.debug(
            "[Epoch %03d] train=%.4f val=%.4f val_accuracy=%.4f",
            epoch,
            train_loss,
            val_loss,
            val_accuracy,
        )

    model.eval()
    return TrainingOutcome(accuracy=val_accuracy, loss=val_loss, history=history)

