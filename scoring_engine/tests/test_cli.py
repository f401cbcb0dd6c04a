"""Tests for the offline training command."""

import asyncio
import os

from ecoscore.core.storage import keys
from ecoscore.core.storage.json_file import JsonFileKeyValueStore
from ecoscore.entrypoints.cli import main

from fakes import make_samples


def test_training_needs_enough_samples(tmp_path) -> None:
    exit_code = main(
        ["--storage", str(tmp_path / "storage"), "--models", str(tmp_path / "models")]
    )

    assert exit_code == 1
    assert not os.path.exists(tmp_path / "models")


def test_training_writes_model_artifacts(tmp_path, capsys) -> None:
    storage = str(tmp_path / "storage")
    models = tmp_path / "models"
    samples = [sample.model_dump(mode="json") for sample in make_samples(12)]
    asyncio.run(JsonFileKeyValueStore(storage).set({keys.TRAINING_DATA: samples}))

    exit_code = main(
        ["--storage", storage, "--models", str(models), "--epochs", "2", "--seed", "7"]
    )

    assert exit_code == 0
    assert sorted(os.listdir(models)) == [
        "ecoscore-sustainability-model.json",
        "ecoscore-sustainability-model.pt",
    ]
    output = capsys.readouterr().out
    assert "[Epoch 001] train=" in output
    assert "[Epoch 002] train=" in output
    assert "[Epoch 003]" not in output
    assert "[TRAIN] samples=12" in output
