"""Aggregate prediction statistics with a periodic refresh from the model service."""

import logging
from typing import Optional

from pydantic import ValidationError

from ecoscore.core.interfaces.storage.key_value import IKeyValueStore
from ecoscore.core.models import MetricsSnapshot
from ecoscore.core.prediction.services.model_service import ModelService
from ecoscore.core.scheduling.timer import PeriodicTimer
from ecoscore.core.storage import keys
from ecoscore.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class MetricsService:
    """Tracks prediction counts and a running accuracy average.

    Accuracy only moves when ground truth is supplied: each labeled
    prediction contributes ``1 - |prediction - actual|`` to the average.
    """

    def __init__(
        self,
        store: IKeyValueStore,
        model_service: ModelService,
        config: Settings = default_settings,
    ) -> None:
        self._store = store
        self._model_service = model_service
        self._config = config
        self._metrics = MetricsSnapshot(model_version=config.model_version)
        self._labeled_predictions = 0
        self._refresh_timer = PeriodicTimer(
            "metrics-refresh", config.metrics_refresh_interval_seconds, self.refresh
        )

    async def initialize(self) -> None:
        await self._load()
        self.start_periodic_update()

    async def _load(self) -> None:
        try:
            data = await self._store.get([keys.METRICS])
        except Exception:
            logger.error("Failed to load ML metrics", exc_info=True)
            return
        raw = data.get(keys.METRICS)
        if not raw:
            return
        try:
            self._metrics = MetricsSnapshot.model_validate(raw)
        except ValidationError:
            logger.warning("Ignoring unreadable persisted ML metrics")
            return
        self._labeled_predictions = int(raw.get("labeled_predictions", 0))

    async def _save(self) -> None:
        payload = self._metrics.model_dump(mode="json")
        payload["labeled_predictions"] = self._labeled_predictions
        try:
            await self._store.set({keys.METRICS: payload})
        except Exception:
            logger.error("Failed to save ML metrics", exc_info=True)

    async def update_metrics(self, prediction: float, actual: Optional[float] = None) -> None:
        self._metrics.total_predictions += 1
        if actual is not None:
            self._labeled_predictions += 1
            new_accuracy = 1.0 - abs(prediction - actual)
            count = self._labeled_predictions
            self._metrics.accuracy_score = (
                self._metrics.accuracy_score * (count - 1) + new_accuracy
            ) / count
        await self._save()

    async def refresh(self) -> None:
        """Copy training-set size and training history from the model service."""
        model_metrics = await self._model_service.get_model_metrics()
        self._metrics.data_points = model_metrics.data_points
        if model_metrics.last_training is not None:
            self._metrics.last_training_date = model_metrics.last_training
        history = self._model_service.training_history()
        if history:
            self._metrics.training_history = history[-self._config.training_history_max_entries :]
        await self._save()

    async def get_metrics(self) -> MetricsSnapshot:
        return self._metrics.model_copy(deep=True)

    def start_periodic_update(self) -> None:
        self._refresh_timer.start()

    async def stop_periodic_update(self) -> None:
        await self._refresh_timer.stop()
