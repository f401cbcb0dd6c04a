"""Prediction cache, analysis cache and error log with write-through persistence."""

import logging
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ecoscore.core.caching.error_log import ErrorLog
from ecoscore.core.caching.expiring_cache import ExpiringCache
from ecoscore.core.caching.fingerprint import cache_key
from ecoscore.core.clock import Clock, now_ms
from ecoscore.core.errors import StorageUnavailableError
from ecoscore.core.interfaces.storage.key_value import IKeyValueStore
from ecoscore.core.models import (
    CacheEntry,
    CacheStats,
    ErrorLogEntry,
    FeatureVector,
    ProductAnalysis,
)
from ecoscore.core.scheduling.timer import PeriodicTimer
from ecoscore.core.storage import keys
from ecoscore.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _parse_entries(raw: Mapping[str, Any], model: Type[ModelT]) -> Dict[str, ModelT]:
    parsed: Dict[str, ModelT] = {}
    for key, value in raw.items():
        try:
            parsed[key] = model.model_validate(value)
        except ValidationError:
            logger.warning("Dropping unreadable %s cache entry %s", model.__name__, key)
    return parsed


class CacheService:
    """Shared cache and error log, injected into the model service and analyzer.

    Every mutation is written through to storage. A failed write is logged
    and the in-memory state stays authoritative until the next write.
    """

    def __init__(
        self,
        store: IKeyValueStore,
        config: Settings = default_settings,
        clock: Clock = now_ms,
    ) -> None:
        self._store = store
        self._clock = clock
        ttl_ms = int(config.cache_ttl_seconds * 1000)
        self.predictions: ExpiringCache[CacheEntry] = ExpiringCache(
            ttl_ms, config.cache_max_entries
        )
        self.analyses: ExpiringCache[ProductAnalysis] = ExpiringCache(
            ttl_ms, config.cache_max_entries
        )
        self.error_log = ErrorLog(
            config.error_log_max_entries, int(config.error_log_ttl_seconds * 1000)
        )
        self._requests = 0
        self._hits = 0
        self._errors = 0
        self._sweep_timer = PeriodicTimer(
            "cache-sweep", config.sweep_interval_seconds, self.sweep
        )

    async def load(self) -> None:
        """Restore persisted state; raises when storage cannot be read."""
        try:
            data = await self._store.get(
                [keys.PREDICTION_CACHE, keys.ANALYSIS_CACHE, keys.ERROR_LOGS, keys.CACHE_STATS]
            )
        except Exception as error:
            raise StorageUnavailableError(f"Cannot read cache storage: {error}") from error

        self.predictions.restore(
            _parse_entries(data.get(keys.PREDICTION_CACHE) or {}, CacheEntry)
        )
        self.analyses.restore(
            _parse_entries(data.get(keys.ANALYSIS_CACHE) or {}, ProductAnalysis)
        )
        error_entries = []
        for raw_entry in data.get(keys.ERROR_LOGS) or []:
            try:
                error_entries.append(ErrorLogEntry.model_validate(raw_entry))
            except ValidationError:
                logger.warning("Dropping unreadable error log entry")
        self.error_log.restore(error_entries)

        counters = data.get(keys.CACHE_STATS) or {}
        self._requests = int(counters.get("requests", 0))
        self._hits = int(counters.get("hits", 0))
        self._errors = int(counters.get("errors", 0))
        logger.info(
            "Loaded %d cached predictions, %d analyses, %d error log entries",
            len(self.predictions),
            len(self.analyses),
            len(self.error_log),
        )

    def start(self) -> None:
        self._sweep_timer.start()

    async def stop(self) -> None:
        await self._sweep_timer.stop()

    async def _persist(self, *store_keys: str) -> None:
        snapshots = {
            keys.PREDICTION_CACHE: self.predictions.dump,
            keys.ANALYSIS_CACHE: self.analyses.dump,
            keys.ERROR_LOGS: self.error_log.dump,
            keys.CACHE_STATS: self._counters,
        }
        try:
            await self._store.set({key: snapshots[key]() for key in store_keys})
        except Exception:
            logger.warning("Failed to persist %s", ", ".join(store_keys), exc_info=True)

    def _counters(self) -> Dict[str, int]:
        return {"requests": self._requests, "hits": self._hits, "errors": self._errors}

    def _lookup(self, cache: ExpiringCache, features: FeatureVector):
        self._requests += 1
        entry = cache.get(cache_key(features), self._clock())
        if entry is not None:
            self._hits += 1
        return entry

    async def get_cached_prediction(self, features: FeatureVector) -> Optional[CacheEntry]:
        return self._lookup(self.predictions, features)

    async def cache_prediction(self, features: FeatureVector, entry: CacheEntry) -> bool:
        """Store ``entry``; returns False when a newer entry already holds the key."""
        written = self.predictions.put(cache_key(features), entry)
        if written:
            await self._persist(keys.PREDICTION_CACHE, keys.CACHE_STATS)
        return written

    async def get_cached_analysis(self, features: FeatureVector) -> Optional[ProductAnalysis]:
        return self._lookup(self.analyses, features)

    async def cache_analysis(self, features: FeatureVector, analysis: ProductAnalysis) -> bool:
        written = self.analyses.put(cache_key(features), analysis)
        if written:
            await self._persist(keys.ANALYSIS_CACHE, keys.CACHE_STATS)
        return written

    async def log_error(
        self, error: BaseException, context: Optional[Mapping[str, Any]] = None
    ) -> ErrorLogEntry:
        entry = self.error_log.record(error, self._clock(), context)
        self._errors += 1
        logger.error("%s (context=%s)", entry.message, entry.context)
        await self._persist(keys.ERROR_LOGS, keys.CACHE_STATS)
        return entry

    async def get_error_logs(self) -> List[ErrorLogEntry]:
        return self.error_log.entries()

    async def sweep(self) -> int:
        """Drop expired cache and error log entries; safe to call repeatedly."""
        now = self._clock()
        removed = self.predictions.sweep(now) + self.analyses.sweep(now)
        purged = self.error_log.purge_expired(now)
        if removed or purged:
            logger.info("Sweep removed %d cache entries and %d error logs", removed, purged)
        await self._persist(keys.PREDICTION_CACHE, keys.ANALYSIS_CACHE, keys.ERROR_LOGS)
        return removed

    async def cleanup_expired_entries(self) -> int:
        return await self.sweep()

    async def clear(self) -> None:
        """Empty both caches and reset the hit/error counters."""
        self.predictions.clear()
        self.analyses.clear()
        self._requests = self._hits = self._errors = 0
        await self._persist(keys.PREDICTION_CACHE, keys.ANALYSIS_CACHE, keys.CACHE_STATS)

    async def stats(self) -> CacheStats:
        requests = self._requests
        return CacheStats(
            cache_size=len(self.predictions),
            hit_rate=self._hits / requests if requests else 0.0,
            error_rate=min(1.0, self._errors / requests) if requests else 0.0,
        )
