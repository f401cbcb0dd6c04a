"""Tests for the caller-facing product analysis."""

import asyncio

import pytest

from ecoscore.core.analysis.analyzer import ProductAnalyzer
from ecoscore.core.caching.cache_service import CacheService
from ecoscore.core.extraction.extractor import FeatureExtractor
from ecoscore.core.metrics.metrics_service import MetricsService
from ecoscore.core.models import Confidence, FeatureVector, ProductMetrics, ProductType, RawProduct, ScoreSource
from ecoscore.core.prediction.services.model_service import ModelService
from ecoscore.core.scoring.heuristic import HeuristicScorer
from ecoscore.core.storage.memory import InMemoryKeyValueStore

from fakes import ECO_LAPTOP, FakeModel, InMemoryModelStore, build_harness, make_settings


def test_model_score_with_rich_features_feeds_training_set() -> None:
    model = FakeModel(score=0.82)
    harness = build_harness(model)

    async def scenario():
        return await harness.analyzer.analyze(ECO_LAPTOP)

    analysis = harness.run(scenario)

    assert analysis.overall_score == 0.82
    assert analysis.source is ScoreSource.MODEL
    # materials, certifications, weight and energy were all found
    assert analysis.confidence == pytest.approx(0.9)
    assert len(harness.model_service.training_samples) == 1
    assert harness.model_service.training_samples[0].label == 0.82


def test_low_confidence_model_score_is_not_used_for_training() -> None:
    harness = build_harness(FakeModel(score=0.4))

    async def scenario():
        return await harness.analyzer.analyze(RawProduct(title="Oak chair", price=80.0))

    analysis = harness.run(scenario)

    assert analysis.confidence == pytest.approx(0.5)
    assert harness.model_service.training_samples == []


def test_falls_back_to_heuristic_when_model_fails() -> None:
    model = FakeModel(failures=10)
    harness = build_harness(model)
    features = FeatureExtractor().extract(ECO_LAPTOP)

    async def scenario():
        analysis = await harness.analyzer.analyze(ECO_LAPTOP)
        cached = await harness.cache.get_cached_prediction(features)
        return analysis, cached, await harness.cache.get_error_logs()

    analysis, cached, logs = harness.run(scenario)

    assert analysis.source is ScoreSource.HEURISTIC
    assert analysis.confidence == 0.6
    assert analysis.overall_score == HeuristicScorer().score(features)
    assert analysis.overall_score > 0.5
    assert cached.confidence is Confidence.LOW
    assert len(logs) == 1
    assert harness.model_service.training_samples == []


def test_falls_back_when_model_service_is_not_initialized() -> None:
    store = InMemoryKeyValueStore()
    config = make_settings()
    cache = CacheService(store, config)
    model_service = ModelService(
        store, cache, InMemoryModelStore(), model_factory=FakeModel, config=config
    )
    metrics = MetricsService(store, model_service, config)
    analyzer = ProductAnalyzer(model_service, cache, metrics, config=config)

    async def scenario():
        analysis = await analyzer.analyze(ECO_LAPTOP)
        return analysis, await cache.get_error_logs()

    analysis, logs = asyncio.run(scenario())

    assert analysis.source is ScoreSource.HEURISTIC
    assert analysis.confidence == 0.6
    assert logs[0].context["stage"] == "analyze"


def test_repeated_analysis_is_served_from_cache() -> None:
    model = FakeModel(score=0.7)
    harness = build_harness(model)

    async def scenario():
        first = await harness.analyzer.analyze(ECO_LAPTOP)
        harness.clock.advance(1000)
        second = await harness.analyzer.analyze(ECO_LAPTOP)
        return first, second

    first, second = harness.run(scenario)

    assert first == second
    assert model.predict_calls == 1


def test_feedback_updates_accuracy_and_training_set() -> None:
    harness = build_harness(FakeModel(score=0.4))
    product = RawProduct(title="Oak chair", price=80.0)

    async def scenario():
        return await harness.analyzer.record_feedback(product, 0.6)

    snapshot = harness.run(scenario)

    assert snapshot.accuracy_score == pytest.approx(0.8)
    assert snapshot.total_predictions == 1
    assert harness.model_service.training_samples[-1].label == 0.6


def test_feedback_on_analyzed_product_reuses_cached_analysis() -> None:
    model = FakeModel(score=0.4)
    harness = build_harness(model)
    product = RawProduct(title="Oak chair", price=80.0)

    async def scenario():
        await harness.analyzer.analyze(product)
        return await harness.analyzer.record_feedback(product, 0.6)

    snapshot = harness.run(scenario)

    assert model.predict_calls == 1
    assert snapshot.total_predictions == 2
    assert snapshot.accuracy_score == pytest.approx(0.8)


def test_metrics_for_eco_laptop() -> None:
    analyzer = build_harness().analyzer
    features = FeatureExtractor().extract(ECO_LAPTOP)

    metrics = analyzer.calculate_metrics(features)

    assert metrics.carbon_footprint == pytest.approx(100.0 + 15.0 + 4.5)
    assert metrics.recycled_materials == pytest.approx(0.25)
    assert metrics.manufacturing_impact == pytest.approx(0.6)
    assert metrics.energy_efficiency == pytest.approx(1.0)
    assert metrics.repairability == 0.0


def test_energy_efficiency_without_consumption_is_perfect() -> None:
    features = FeatureVector(product_type=ProductType.CLOTHING)

    assert ProductAnalyzer.energy_efficiency(features) == 1.0


def test_recommendations_depend_on_metrics() -> None:
    good = ProductMetrics(
        carbon_footprint=10.0,
        recycled_materials=0.75,
        sustainable_packaging=0.5,
        manufacturing_impact=0.7,
        energy_efficiency=0.9,
        repairability=0.75,
    )
    poor = good.model_copy(update={"energy_efficiency": 0.2, "carbon_footprint": 120.0})

    assert ProductAnalyzer.generate_recommendations(good) == []
    assert ProductAnalyzer.generate_recommendations(poor) == [
        "Look for more energy-efficient alternatives",
        "Consider local alternatives to reduce transportation emissions",
    ]


def test_alternatives_bracket_the_price() -> None:
    analyzer = build_harness().analyzer
    alternatives = analyzer.find_alternatives(ECO_LAPTOP, ProductType.ELECTRONICS)

    assert [a.title for a in alternatives] == [
        "Eco-friendly electronics",
        "Sustainable electronics",
    ]
    assert alternatives[0].price_range == pytest.approx((899.0 * 0.8, 899.0 * 1.2))
    assert alternatives[0].url.endswith("/eco-electronics")


def test_certification_verification() -> None:
    assert ProductAnalyzer.verify_certification("Energy Star")
    assert ProductAnalyzer.verify_certification("organic")
    assert not ProductAnalyzer.verify_certification("made from")
    assert not ProductAnalyzer.verify_certification("  ")
