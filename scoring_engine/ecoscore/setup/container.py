"""Wires one instance of each service for the lifetime of the process."""

import logging
from dataclasses import dataclass
from typing import Optional

from ecoscore.core.analysis.analyzer import ProductAnalyzer
from ecoscore.core.caching.cache_service import CacheService
from ecoscore.core.interfaces.storage.key_value import IKeyValueStore
from ecoscore.core.interfaces.storage.model_store import IModelStore
from ecoscore.core.metrics.metrics_service import MetricsService
from ecoscore.core.prediction.model.load import TorchModelStore
from ecoscore.core.prediction.services.model_service import ModelService
from ecoscore.core.prediction.services.predictor import TorchScoringModel
from ecoscore.core.storage.json_file import JsonFileKeyValueStore
from ecoscore.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """The shared services, constructed once and passed by reference."""

    cache: CacheService
    model_service: ModelService
    metrics: MetricsService
    analyzer: ProductAnalyzer

    async def start(self) -> None:
        """Load persisted state and start the periodic timers.

        Raises StorageUnavailableError when storage cannot be read.
        """
        await self.cache.load()
        await self.model_service.initialize()
        await self.metrics.initialize()
        self.cache.start()
        logger.info("Scoring services started (model %s)", self.model_service.state.value)

    async def shutdown(self) -> None:
        await self.cache.stop()
        await self.metrics.stop_periodic_update()
        await self.model_service.shutdown()
        logger.info("Scoring services stopped")


def build_container(
    config: Settings = default_settings,
    store: Optional[IKeyValueStore] = None,
    model_store: Optional[IModelStore] = None,
) -> ServiceContainer:
    """Construct the service graph; storage defaults to the configured directories."""
    store = store or JsonFileKeyValueStore(config.storage_directory)
    model_store = model_store or TorchModelStore(config.model_directory, config.model_name)
    cache = CacheService(store, config)
    model_service = ModelService(
        store,
        cache,
        model_store,
        model_factory=lambda: TorchScoringModel.from_settings(config),
        config=config,
    )
    metrics = MetricsService(store, model_service, config)
    analyzer = ProductAnalyzer(model_service, cache, metrics, config=config)
    return ServiceContainer(
        cache=cache, model_service=model_service, metrics=metrics, analyzer=analyzer
    )
