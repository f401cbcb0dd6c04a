from .analysis import (
    Alternative,
    CertificationCheck,
    ProductAnalysis,
    ProductMetrics,
    ScoreSource,
)
from .cache import CacheEntry, CacheStats, Confidence, ErrorLogEntry
from .metrics import MetricsSnapshot, ModelMetrics, TrainingRecord
from .product import (
    FeatureVector,
    ProductType,
    RawProduct,
    SellerInfo,
    TrainingSample,
)

__all__ = [
    "Alternative",
    "CacheEntry",
    "CacheStats",
    "CertificationCheck",
    "Confidence",
    "ErrorLogEntry",
    "FeatureVector",
    "MetricsSnapshot",
    "ModelMetrics",
    "ProductAnalysis",
    "ProductMetrics",
    "ProductType",
    "RawProduct",
    "ScoreSource",
    "SellerInfo",
    "TrainingRecord",
    "TrainingSample",
]
