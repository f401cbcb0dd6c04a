"""Feature vectorization helpers."""

import math
import re
import zlib
from typing import Iterable, List, Sequence

import numpy as np

from ecoscore.core.models import FeatureVector, ProductType

TITLE_BUCKETS = 100
DESCRIPTION_BUCKETS = 1000
MAX_TITLE_WORDS = 100
MAX_DESCRIPTION_WORDS = 1000

MATERIAL_CATEGORIES = ["plastic", "wood", "metal", "glass", "fabric", "paper", "organic"]
CERTIFICATION_CATEGORIES = ["energy star", "fair trade", "organic", "recyclable"]
PRODUCT_TYPE_CATEGORIES = [t for t in ProductType if t is not ProductType.OTHER]
NUMERIC_FEATURES = ["price", "weight", "energy_consumption"]

INPUT_DIMENSION = (
    TITLE_BUCKETS
    + DESCRIPTION_BUCKETS
    + len(MATERIAL_CATEGORIES)
    + len(CERTIFICATION_CATEGORIES)
    + len(PRODUCT_TYPE_CATEGORIES)
    + len(NUMERIC_FEATURES)
)

_NON_WORD = re.compile(r"[^\w\s]")


def _log1p_safe(value: float) -> float:
    return math.log1p(max(value, 0.0))


def text_frequency_vector(text: str, buckets: int, max_words: int) -> np.ndarray:
    """Normalized word frequencies hashed into a fixed number of buckets.

    crc32 keeps bucket assignment stable across processes.
    """
    vector = np.zeros(buckets, dtype=np.float32)
    words = [w for w in _NON_WORD.sub("", text.lower()).split() if w][:max_words]
    if not words:
        return vector
    for word in words:
        vector[zlib.crc32(word.encode("utf-8")) % buckets] += 1.0
    return vector / float(len(words))


def multi_hot(values: Iterable[str], categories: Sequence[str]) -> np.ndarray:
    """Count how many values mention each category."""
    vector = np.zeros(len(categories), dtype=np.float32)
    for value in values:
        lowered = value.lower()
        for idx, category in enumerate(categories):
            if category in lowered:
                vector[idx] += 1.0
    return vector


def vectorize(features: FeatureVector) -> np.ndarray:
    """Produce the model input row for one product, shape ``(1, INPUT_DIMENSION)``."""
    product_type = np.array(
        [1.0 if features.product_type is t else 0.0 for t in PRODUCT_TYPE_CATEGORIES],
        dtype=np.float32,
    )
    numeric = np.array(
        [
            _log1p_safe(features.price),
            _log1p_safe(features.weight),
            _log1p_safe(features.energy_consumption),
        ],
        dtype=np.float32,
    )
    vector = np.concatenate(
        [
            text_frequency_vector(features.title, TITLE_BUCKETS, MAX_TITLE_WORDS),
            text_frequency_vector(
                features.description, DESCRIPTION_BUCKETS, MAX_DESCRIPTION_WORDS
            ),
            multi_hot(sorted(features.materials), MATERIAL_CATEGORIES),
            multi_hot(sorted(features.certifications), CERTIFICATION_CATEGORIES),
            product_type,
            numeric,
        ]
    )
    return vector.reshape(1, -1)


def vectorize_batch(batch: List[FeatureVector]) -> np.ndarray:
    """Stack rows for many products, shape ``(len(batch), INPUT_DIMENSION)``."""
    if not batch:
        return np.zeros((0, INPUT_DIMENSION), dtype=np.float32)
    return np.concatenate([vectorize(features) for features in batch], axis=0)
