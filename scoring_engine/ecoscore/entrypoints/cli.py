"""Offline training: fit the scoring model on the persisted training set."""

import argparse
import asyncio
import logging
import time
from typing import Optional, Sequence

from ecoscore.core.prediction.model.load import TorchModelStore
from ecoscore.core.prediction.model.train import set_random_seed
from ecoscore.core.prediction.services.model_service import load_training_samples
from ecoscore.core.prediction.services.predictor import TorchScoringModel
from ecoscore.core.storage.json_file import JsonFileKeyValueStore
from ecoscore.settings import Settings, settings

logger = logging.getLogger(__name__)


async def train(config: Settings) -> int:
    """Train and save a model; returns the process exit code."""
    set_random_seed(config.random_seed)

    store = JsonFileKeyValueStore(config.storage_directory)
    samples = await load_training_samples(store)
    if len(samples) < config.training_min_samples:
        logger.error(
            "Need at least %d training samples, found %d in %s",
            config.training_min_samples,
            len(samples),
            config.storage_directory,
        )
        return 1

    model = TorchScoringModel.from_settings(config)
    started = time.time()
    result = await asyncio.to_thread(model.fit, samples)
    history = result.history or {}
    for epoch, train_loss in enumerate(history.get("train", []), start=1):
        print(
            f"[Epoch {epoch:03d}] train={train_loss:.6f} "
            f"val={history['val'][epoch - 1]:.6f} "
            f"val_accuracy={history['val_accuracy'][epoch - 1]:.4f}"
        )
    print(
        f"[TRAIN] samples={len(samples)} accuracy={result.accuracy:.4f} "
        f"loss={result.loss:.6f} time={time.time() - started:.2f}s"
    )

    model_store = TorchModelStore(config.model_directory, config.model_name)
    await model_store.save(model)
    print(f"Saved weights -> {model_store.weights_path}")
    print(f"Saved meta    -> {model_store.meta_path}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse arguments and run one offline training pass."""
    argument_parser = argparse.ArgumentParser(description=__doc__)
    argument_parser.add_argument("--epochs", type=int, default=settings.training_epochs)
    argument_parser.add_argument("--seed", type=int, default=settings.random_seed)
    argument_parser.add_argument("--storage", default=settings.storage_directory)
    argument_parser.add_argument("--models", default=settings.model_directory)
    arguments = argument_parser.parse_args(argv)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = settings.model_copy(
        update={
            "training_epochs": arguments.epochs,
            "random_seed": arguments.seed,
            "storage_directory": arguments.storage,
            "model_directory": arguments.models,
        }
    )
    return asyncio.run(train(config))


if __name__ == "__main__":
    raise SystemExit(main())
