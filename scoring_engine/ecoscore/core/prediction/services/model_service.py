"""Model service: cached, retried inference and incremental retraining."""

import asyncio
import logging
from collections import deque
from enum import Enum
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional

from pydantic import ValidationError
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential

from ecoscore.core.caching.cache_service import CacheService
from ecoscore.core.clock import Clock, now_ms
from ecoscore.core.errors import (
    ModelNotReadyError,
    PredictionFailedError,
    PredictionTimeoutError,
    StorageUnavailableError,
    TrainingFailedError,
)
from ecoscore.core.interfaces.services.scoring_model import IScoringModel
from ecoscore.core.interfaces.storage.key_value import IKeyValueStore
from ecoscore.core.interfaces.storage.model_store import IModelStore
from ecoscore.core.models import (
    CacheEntry,
    Confidence,
    FeatureVector,
    ModelMetrics,
    TrainingRecord,
    TrainingSample,
)
from ecoscore.core.storage import keys
from ecoscore.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[Any]]


class ModelState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    TRAINING = "training"


def _parse_samples(raw: List[Dict[str, Any]]) -> List[TrainingSample]:
    samples = []
    for item in raw:
        try:
            samples.append(TrainingSample.model_validate(item))
        except ValidationError:
            logger.warning("Dropping unreadable training sample")
    return samples


async def load_training_samples(store: IKeyValueStore) -> List[TrainingSample]:
    """Read the persisted training set."""
    data = await store.get([keys.TRAINING_DATA])
    return _parse_samples(data.get(keys.TRAINING_DATA) or [])


class ModelService:
    """Owns the scoring model and its training set.

    ``predict`` never substitutes a heuristic score: when every attempt fails
    it raises :class:`PredictionFailedError` and leaves fallback to the caller.
    """

    def __init__(
        self,
        store: IKeyValueStore,
        cache: CacheService,
        model_store: IModelStore,
        model_factory: Callable[[], IScoringModel],
        config: Settings = default_settings,
        clock: Clock = now_ms,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._store = store
        self._cache = cache
        self._model_store = model_store
        self._model_factory = model_factory
        self._config = config
        self._clock = clock
        self._sleep = sleep
        self._model: Optional[IScoringModel] = None
        self._training_samples: Deque[TrainingSample] = deque(
            maxlen=config.training_set_max_size
        )
        self._history: Deque[TrainingRecord] = deque(
            maxlen=config.training_history_max_entries
        )
        self._accuracy = 0.0
        self._last_training: Optional[int] = None
        self._additions = 0
        self._is_training = False
        self._training_task: Optional[asyncio.Task] = None
        self.late_results_discarded = 0

    @property
    def state(self) -> ModelState:
        if self._model is None:
            return ModelState.UNINITIALIZED
        if self._is_training:
            return ModelState.TRAINING
        return ModelState.READY

    @property
    def training_samples(self) -> List[TrainingSample]:
        return list(self._training_samples)

    async def initialize(self) -> None:
        """Restore the training set and model, creating a fresh model if needed."""
        try:
            data = await self._store.get(
                [keys.TRAINING_DATA, keys.TRAINING_HISTORY, keys.MODEL_ACCURACY, keys.LAST_TRAINING]
            )
        except Exception as error:
            raise StorageUnavailableError(f"Cannot read model storage: {error}") from error

        self._training_samples.extend(_parse_samples(data.get(keys.TRAINING_DATA) or []))
        for raw_record in data.get(keys.TRAINING_HISTORY) or []:
            try:
                self._history.append(TrainingRecord.model_validate(raw_record))
            except ValidationError:
                logger.warning("Dropping unreadable training record")
        self._accuracy = float(data.get(keys.MODEL_ACCURACY) or 0.0)
        self._last_training = data.get(keys.LAST_TRAINING)

        model = await self._model_store.load()
        if model is not None:
            self._model = model
            logger.info("Loaded persisted model; %d training samples", len(self._training_samples))
            return

        self._model = self._model_factory()
        logger.info("Created a fresh model; %d training samples", len(self._training_samples))
        try:
            await self.train_model()
        except TrainingFailedError:
            logger.warning("Initial training failed; serving the untrained model")

    async def predict(self, features: FeatureVector) -> float:
        """Return the model score for ``features``, using the cache when possible."""
        if self._model is None:
            raise ModelNotReadyError("Model service is not initialized")

        cached = await self._cache.get_cached_prediction(features)
        # Low-confidence entries are heuristic placeholders; give the model a go.
        if cached is not None and cached.confidence is not Confidence.LOW:
            return cached.score

        attempts = 0
        # Wait 2^attempt * backoff after failed attempt ``attempt`` (1-based).
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._config.prediction_max_retries),
            wait=wait_exponential(
                multiplier=2 * self._config.retry_backoff_seconds, exp_base=2
            ),
            sleep=self._sleep,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    score = await self._infer_with_timeout(features)
        except Exception as error:
            await self._cache.log_error(
                error,
                {"stage": "predict", "features": features.summary(), "attempt": attempts},
            )
            raise PredictionFailedError(
                f"Prediction failed after {attempts} attempts: {error}", attempts
            ) from error

        await self._cache.cache_prediction(
            features,
            CacheEntry(score=score, confidence=Confidence.HIGH, timestamp=self._clock()),
        )
        return score

    async def _infer_with_timeout(self, features: FeatureVector) -> float:
        model = self._model
        if model is None:
            raise ModelNotReadyError("Model service is not initialized")
        task = asyncio.ensure_future(asyncio.to_thread(model.predict_score, features))
        try:
            done, _ = await asyncio.wait({task}, timeout=self._config.prediction_timeout_seconds)
        finally:
            if not task.done():
                task.add_done_callback(self._discard_late_result)
        if task not in done:
            raise PredictionTimeoutError(
                f"Prediction timed out after {self._config.prediction_timeout_seconds}s"
            )
        return task.result()

    def _discard_late_result(self, task: asyncio.Future) -> None:
        if task.cancelled():
            return
        self.late_results_discarded += 1
        error = task.exception()
        if error is not None:
            logger.debug("Timed-out inference later failed: %s", error)
        else:
            logger.debug("Discarding inference result that arrived after its timeout")

    async def add_training_data(self, features: FeatureVector, score: float) -> None:
        """Append a labeled sample and retrain on every Nth addition."""
        label = max(0.0, min(1.0, score))
        self._training_samples.append(TrainingSample(features=features, label=label))
        self._additions += 1
        try:
            await self._store.set(
                {
                    keys.TRAINING_DATA: [
                        sample.model_dump(mode="json") for sample in self._training_samples
                    ]
                }
            )
        except Exception as error:
            await self._cache.log_error(
                error, {"stage": "add_training_data", "features": features.summary()}
            )
        if self._additions % self._config.retrain_every == 0:
            self._schedule_training()

    def _schedule_training(self) -> None:
        if self._is_training or (self._training_task and not self._training_task.done()):
            return
        self._training_task = asyncio.get_running_loop().create_task(self.train_model())
        self._training_task.add_done_callback(self._report_training_outcome)

    @staticmethod
    def _report_training_outcome(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning("Background training failed: %s", error)

    async def wait_for_training(self) -> None:
        """Wait for a scheduled background training run, if any."""
        task = self._training_task
        if task is not None and not task.done():
            await asyncio.wait({task})

    async def train_model(self) -> Optional[TrainingRecord]:
        """Fit the model on the whole training set.

        Returns None without training when a run is in progress or there are
        too few samples.
        """
        if (
            self._model is None
            or self._is_training
            or len(self._training_samples) < self._config.training_min_samples
        ):
            return None

        self._is_training = True
        samples = list(self._training_samples)
        try:
            result = await asyncio.to_thread(self._model.fit, samples)
            await self._model_store.save(self._model)
            record = TrainingRecord(
                timestamp=self._clock(), accuracy=result.accuracy, loss=result.loss
            )
            self._history.append(record)
            self._accuracy = record.accuracy
            self._last_training = record.timestamp
            await self._store.set(
                {
                    keys.TRAINING_HISTORY: [r.model_dump(mode="json") for r in self._history],
                    keys.MODEL_ACCURACY: record.accuracy,
                    keys.LAST_TRAINING: record.timestamp,
                }
            )
            logger.info(
                "Model training completed on %d samples: accuracy=%.4f loss=%.4f",
                len(samples),
                record.accuracy,
                record.loss,
            )
            return record
        except Exception as error:
            await self._cache.log_error(error, {"stage": "train_model", "samples": len(samples)})
            raise TrainingFailedError(f"Training failed: {error}") from error
        finally:
            self._is_training = False

    def training_history(self) -> List[TrainingRecord]:
        return list(self._history)

    async def get_model_metrics(self) -> ModelMetrics:
        accuracy, last_training = self._accuracy, self._last_training
        try:
            data = await self._store.get([keys.MODEL_ACCURACY, keys.LAST_TRAINING])
            accuracy = float(data.get(keys.MODEL_ACCURACY, accuracy))
            last_training = data.get(keys.LAST_TRAINING, last_training)
        except Exception as error:
            await self._cache.log_error(error, {"stage": "get_model_metrics"})
        return ModelMetrics(
            data_points=len(self._training_samples),
            last_training=last_training,
            accuracy=accuracy,
        )

    async def shutdown(self) -> None:
        await self.wait_for_training()
