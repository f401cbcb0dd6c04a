"""Caller-facing product analysis."""

import logging
from typing import List, Optional, Sequence

from ecoscore.core.caching.cache_service import CacheService
from ecoscore.core.clock import Clock, now_ms
from ecoscore.core.errors import ModelNotReadyError, PredictionFailedError
from ecoscore.core.extraction.extractor import FeatureExtractor
from ecoscore.core.extraction.keywords import (
    PACKAGING_KEYWORDS,
    RECOGNISED_CERTIFICATIONS,
    RECYCLED_KEYWORDS,
    REPAIR_KEYWORDS,
    SUSTAINABLE_MATERIALS,
    UNSUSTAINABLE_MATERIALS,
)
from ecoscore.core.metrics.metrics_service import MetricsService
from ecoscore.core.models import (
    Alternative,
    CacheEntry,
    CertificationCheck,
    Confidence,
    FeatureVector,
    MetricsSnapshot,
    ProductAnalysis,
    ProductMetrics,
    ProductType,
    RawProduct,
    ScoreSource,
)
from ecoscore.core.prediction.services.model_service import ModelService
from ecoscore.core.scoring.heuristic import HeuristicScorer
from ecoscore.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

BASE_FOOTPRINT_KG = {
    ProductType.ELECTRONICS: 100.0,
    ProductType.CLOTHING: 10.0,
    ProductType.FURNITURE: 50.0,
    ProductType.APPLIANCES: 200.0,
    ProductType.FOOD: 5.0,
    ProductType.OTHER: 20.0,
}
TYPICAL_WATTS = {
    ProductType.ELECTRONICS: 100.0,
    ProductType.APPLIANCES: 1000.0,
    ProductType.OTHER: 50.0,
}


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _keyword_share(text: str, keywords: Sequence[str]) -> float:
    """Fraction of ``keywords`` found in ``text``."""
    return sum(1 for keyword in keywords if keyword in text) / len(keywords)


class ProductAnalyzer:
    """Scores a product and assembles the full analysis shown to users.

    The caller always gets a score: when the model is unavailable or fails,
    the heuristic scorer answers with reduced confidence.
    """

    def __init__(
        self,
        model_service: ModelService,
        cache: CacheService,
        metrics: MetricsService,
        extractor: Optional[FeatureExtractor] = None,
        scorer: Optional[HeuristicScorer] = None,
        config: Settings = default_settings,
        clock: Clock = now_ms,
    ) -> None:
        self._model_service = model_service
        self._cache = cache
        self._metrics = metrics
        self._extractor = extractor or FeatureExtractor()
        self._scorer = scorer or HeuristicScorer()
        self._config = config
        self._clock = clock

    async def analyze(self, product: RawProduct) -> ProductAnalysis:
        features = self._extractor.extract(product)
        cached = await self._cache.get_cached_analysis(features)
        if cached is not None:
            return cached

        analysis = await self._score(product, features)
        await self._metrics.update_metrics(analysis.overall_score)
        return analysis

    async def record_feedback(self, product: RawProduct, actual_score: float) -> MetricsSnapshot:
        """Fold a ground-truth score into accuracy and the training set.

        Each call counts as one prediction, whether or not the product had
        to be scored first.
        """
        features = self._extractor.extract(product)
        analysis = await self._cache.get_cached_analysis(features)
        if analysis is None:
            analysis = await self._score(product, features)
        await self._metrics.update_metrics(analysis.overall_score, actual_score)
        await self._model_service.add_training_data(features, actual_score)
        return await self._metrics.get_metrics()

    async def _score(self, product: RawProduct, features: FeatureVector) -> ProductAnalysis:
        """Predict or fall back, then cache the resulting analysis."""
        try:
            score = await self._model_service.predict(features)
            confidence = self.calculate_confidence(features)
            source = ScoreSource.MODEL
        except (ModelNotReadyError, PredictionFailedError) as error:
            if isinstance(error, ModelNotReadyError):
                await self._cache.log_error(
                    error, {"stage": "analyze", "product": product.url}
                )
            logger.warning("Falling back to heuristic score for %s: %s", product.url, error)
            score = self._scorer.score(features)
            confidence = self._config.fallback_confidence
            source = ScoreSource.HEURISTIC
            await self._cache.cache_prediction(
                features,
                CacheEntry(score=score, confidence=Confidence.LOW, timestamp=self._clock()),
            )

        analysis = self.build_analysis(product, features, score, confidence, source)
        await self._cache.cache_analysis(features, analysis)

        if source is ScoreSource.MODEL and confidence > self._config.high_confidence_threshold:
            await self._model_service.add_training_data(features, score)
        return analysis

    def build_analysis(
        self,
        product: RawProduct,
        features: FeatureVector,
        score: float,
        confidence: float,
        source: ScoreSource,
    ) -> ProductAnalysis:
        metrics = self.calculate_metrics(features)
        return ProductAnalysis(
            overall_score=_clamp(score),
            metrics=metrics,
            confidence=confidence,
            alternatives=self.find_alternatives(product, features.product_type),
            certifications=[
                CertificationCheck(name=name, verified=self.verify_certification(name))
                for name in sorted(features.certifications)
            ],
            recommendations=self.generate_recommendations(metrics),
            timestamp=self._clock(),
            source=source,
        )

    @staticmethod
    def calculate_confidence(features: FeatureVector) -> float:
        confidence = 0.5
        if features.materials:
            confidence += 0.1
        if features.certifications:
            confidence += 0.1
        if features.weight > 0:
            confidence += 0.1
        if features.energy_consumption > 0:
            confidence += 0.1
        if len(features.description) > 100:
            confidence += 0.1
        return min(1.0, round(confidence, 6))

    def calculate_metrics(self, features: FeatureVector) -> ProductMetrics:
        summary_text = f"{features.title} {features.description}".lower()
        materials_text = " ".join(sorted(features.materials)).lower()
        return ProductMetrics(
            carbon_footprint=self.carbon_footprint(features),
            recycled_materials=_keyword_share(materials_text, RECYCLED_KEYWORDS),
            sustainable_packaging=_keyword_share(summary_text, PACKAGING_KEYWORDS),
            manufacturing_impact=self.manufacturing_impact(features),
            energy_efficiency=self.energy_efficiency(features),
            repairability=_keyword_share(summary_text, REPAIR_KEYWORDS),
        )

    @staticmethod
    def carbon_footprint(features: FeatureVector) -> float:
        """Base footprint by type, plus 10 kg per kg of weight and 0.1 kg per watt."""
        base = BASE_FOOTPRINT_KG[features.product_type]
        return base + features.weight * 10.0 + features.energy_consumption * 0.1

    @staticmethod
    def manufacturing_impact(features: FeatureVector) -> float:
        score = 0.5
        for material in features.materials:
            lowered = material.lower()
            if any(m in lowered for m in SUSTAINABLE_MATERIALS):
                score += 0.1
            if any(m in lowered for m in UNSUSTAINABLE_MATERIALS):
                score -= 0.1
        return _clamp(score)

    @staticmethod
    def energy_efficiency(features: FeatureVector) -> float:
        if features.energy_consumption == 0:
            return 1.0
        typical = TYPICAL_WATTS.get(features.product_type, 100.0)
        ratio = features.energy_consumption / typical
        return _clamp(1.0 - (ratio - 0.5))

    def find_alternatives(self, product: RawProduct, product_type: ProductType) -> List[Alternative]:
        base_url = self._config.alternatives_base_url.rstrip("/")
        kind = product_type.value
        return [
            Alternative(
                title=f"Eco-friendly {kind}",
                url=f"{base_url}/eco-{kind}",
                score=0.9,
                price_range=(product.price * 0.8, product.price * 1.2),
            ),
            Alternative(
                title=f"Sustainable {kind}",
                url=f"{base_url}/sustainable-{kind}",
                score=0.85,
                price_range=(product.price * 0.9, product.price * 1.1),
            ),
        ]

    @staticmethod
    def generate_recommendations(metrics: ProductMetrics) -> List[str]:
        recommendations = []
        if metrics.energy_efficiency < 0.8:
            recommendations.append("Look for more energy-efficient alternatives")
        if metrics.recycled_materials < 0.5:
            recommendations.append("Look for products with recycled materials")
        if metrics.carbon_footprint > 50:
            recommendations.append(
                "Consider local alternatives to reduce transportation emissions"
            )
        if metrics.repairability < 0.5:
            recommendations.append("Consider products with better repairability scores")
        return recommendations

    @staticmethod
    def verify_certification(certification: str) -> bool:
        name = certification.lower().strip()
        if not name:
            return False
        return any(valid in name or name in valid for valid in RECOGNISED_CERTIFICATIONS)
