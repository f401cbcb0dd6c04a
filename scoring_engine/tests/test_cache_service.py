"""Tests for the write-through cache service and error log."""

import asyncio
import time

import pytest

from ecoscore.core.caching.cache_service import CacheService
from ecoscore.core.errors import StorageUnavailableError
from ecoscore.core.models import CacheEntry, Confidence
from ecoscore.core.storage import keys
from ecoscore.core.storage.json_file import JsonFileKeyValueStore
from ecoscore.core.storage.memory import InMemoryKeyValueStore

from fakes import HOUR_MS, ManualClock, ReadOnlyStore, UnreadableStore, make_features, make_settings


def build_cache(store=None, clock=None, **overrides) -> CacheService:
    return CacheService(
        store or InMemoryKeyValueStore(),
        make_settings(**overrides),
        clock=clock or ManualClock(),
    )


def test_prediction_is_written_through() -> None:
    store = InMemoryKeyValueStore()
    clock = ManualClock()
    cache = build_cache(store, clock)
    features = make_features()

    async def scenario():
        await cache.cache_prediction(
            features, CacheEntry(score=0.7, confidence=Confidence.HIGH, timestamp=clock())
        )
        return await store.get([keys.PREDICTION_CACHE])

    persisted = asyncio.run(scenario())

    assert len(persisted[keys.PREDICTION_CACHE]) == 1
    assert list(persisted[keys.PREDICTION_CACHE].values())[0]["score"] == 0.7


def test_products_sharing_title_type_price_share_an_entry() -> None:
    clock = ManualClock()
    cache = build_cache(clock=clock)

    async def scenario():
        await cache.cache_prediction(
            make_features(description="solid oak"),
            CacheEntry(score=0.9, confidence=Confidence.HIGH, timestamp=clock()),
        )
        return await cache.get_cached_prediction(make_features(description="plastic"))

    assert asyncio.run(scenario()).score == 0.9


def test_sweep_removes_exactly_the_expired_entry() -> None:
    clock = ManualClock()
    cache = build_cache(clock=clock)

    async def scenario():
        await cache.cache_prediction(
            make_features(title="old"),
            CacheEntry(score=0.4, confidence=Confidence.HIGH, timestamp=clock()),
        )
        clock.advance(25 * HOUR_MS)
        await cache.cache_prediction(
            make_features(title="new"),
            CacheEntry(score=0.6, confidence=Confidence.HIGH, timestamp=clock()),
        )
        missing = await cache.get_cached_prediction(make_features(title="old"))
        before = (await cache.stats()).cache_size
        removed = await cache.sweep()
        after = (await cache.stats()).cache_size
        return missing, before, removed, after

    missing, before, removed, after = asyncio.run(scenario())

    assert missing is None
    assert removed == 1
    assert before - after == 1


def test_error_log_keeps_newest_hundred() -> None:
    cache = build_cache()

    async def scenario():
        for index in range(105):
            await cache.log_error(RuntimeError(f"error {index}"), {"index": index})
        return await cache.get_error_logs()

    entries = asyncio.run(scenario())

    assert len(entries) == 100
    assert entries[0].message == "error 104"
    assert entries[-1].message == "error 5"
    assert entries[0].context == {"index": 104}


def test_error_logs_older_than_a_week_are_purged() -> None:
    clock = ManualClock()
    cache = build_cache(clock=clock)

    async def scenario():
        await cache.log_error(ValueError("stale"))
        clock.advance(8 * 24 * HOUR_MS)
        await cache.log_error(ValueError("recent"))
        await cache.sweep()
        return await cache.get_error_logs()

    entries = asyncio.run(scenario())

    assert [entry.message for entry in entries] == ["recent"]


def test_stats_report_hit_and_error_rates() -> None:
    clock = ManualClock()
    cache = build_cache(clock=clock)
    features = make_features()

    async def scenario():
        await cache.get_cached_prediction(features)
        await cache.cache_prediction(
            features, CacheEntry(score=0.5, confidence=Confidence.HIGH, timestamp=clock())
        )
        await cache.get_cached_prediction(features)
        await cache.log_error(RuntimeError("boom"))
        return await cache.stats()

    stats = asyncio.run(scenario())

    assert stats.cache_size == 1
    assert stats.hit_rate == pytest.approx(0.5)
    assert stats.error_rate == pytest.approx(0.5)


def test_clear_empties_caches_and_counters() -> None:
    clock = ManualClock()
    cache = build_cache(clock=clock)
    features = make_features()

    async def scenario():
        await cache.cache_prediction(
            features, CacheEntry(score=0.5, confidence=Confidence.HIGH, timestamp=clock())
        )
        await cache.get_cached_prediction(features)
        await cache.clear()
        return await cache.stats()

    stats = asyncio.run(scenario())

    assert stats.cache_size == 0
    assert stats.hit_rate == 0.0


def test_load_restores_persisted_state_and_skips_bad_entries() -> None:
    clock = ManualClock()
    store = InMemoryKeyValueStore(
        {
            keys.PREDICTION_CACHE: {
                "good": {"score": 0.3, "confidence": "medium", "timestamp": clock()},
                "bad": {"score": 7, "confidence": "sure", "timestamp": "never"},
            },
            keys.ERROR_LOGS: [{"message": "earlier", "context": {}, "timestamp": clock()}],
            keys.CACHE_STATS: {"requests": 4, "hits": 1, "errors": 1},
        }
    )
    cache = build_cache(store, clock)

    async def scenario():
        await cache.load()
        return await cache.stats(), await cache.get_error_logs()

    stats, errors = asyncio.run(scenario())

    assert stats.cache_size == 1
    assert stats.hit_rate == pytest.approx(0.25)
    assert [entry.message for entry in errors] == ["earlier"]


def test_load_fails_when_storage_is_unreadable() -> None:
    cache = build_cache(UnreadableStore())

    with pytest.raises(StorageUnavailableError):
        asyncio.run(cache.load())


def test_failed_write_keeps_memory_state() -> None:
    clock = ManualClock()
    cache = build_cache(ReadOnlyStore(), clock)
    features = make_features()

    async def scenario():
        written = await cache.cache_prediction(
            features, CacheEntry(score=0.5, confidence=Confidence.HIGH, timestamp=clock())
        )
        return written, await cache.get_cached_prediction(features)

    written, cached = asyncio.run(scenario())

    assert written
    assert cached.score == 0.5


class SlowFirstWriteStore(JsonFileKeyValueStore):
    """Delays its first write so a later write could overtake it."""

    def __init__(self, directory: str) -> None:
        super().__init__(directory)
        self.writes = 0

    def _write(self, items) -> None:
        self.writes += 1
        if self.writes == 1:
            time.sleep(0.2)
        super()._write(items)


def test_concurrent_writes_persist_latest_snapshot(tmp_path) -> None:
    directory = str(tmp_path / "storage")
    clock = ManualClock()
    cache = build_cache(SlowFirstWriteStore(directory), clock)

    async def scenario():
        await asyncio.gather(
            cache.cache_prediction(
                make_features(title="a"),
                CacheEntry(score=0.2, confidence=Confidence.HIGH, timestamp=clock()),
            ),
            cache.cache_prediction(
                make_features(title="b"),
                CacheEntry(score=0.8, confidence=Confidence.HIGH, timestamp=clock()),
            ),
        )
        return await JsonFileKeyValueStore(directory).get([keys.PREDICTION_CACHE])

    persisted = asyncio.run(scenario())

    assert len(persisted[keys.PREDICTION_CACHE]) == 2
    assert len(cache.predictions) == 2


def test_sweep_is_idempotent() -> None:
    clock = ManualClock()
    cache = build_cache(clock=clock)

    async def scenario():
        await cache.cache_prediction(
            make_features(title="old"),
            CacheEntry(score=0.4, confidence=Confidence.HIGH, timestamp=clock()),
        )
        clock.advance(25 * HOUR_MS)
        await cache.cache_prediction(
            make_features(title="new"),
            CacheEntry(score=0.6, confidence=Confidence.HIGH, timestamp=clock()),
        )
        first = await cache.sweep()
        size = (await cache.stats()).cache_size
        second = await cache.sweep()
        return first, size, second, (await cache.stats()).cache_size

    first, size, second, size_after = asyncio.run(scenario())

    assert first == 1
    assert second == 0
    assert size == size_after == 1
