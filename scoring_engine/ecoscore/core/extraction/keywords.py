"""Keyword tables used by the extractor and the heuristic scorer.

Tables are ordered tuples: product-type detection returns the first entry
with a matching keyword, so entry order is part of the contract.
"""

from dataclasses import dataclass
from typing import Tuple

from ecoscore.core.models import ProductType


@dataclass(frozen=True)
class ProductTypeKeywords:
    product_type: ProductType
    keywords: Tuple[str, ...]


@dataclass(frozen=True)
class KeywordFamily:
    """A group of phrases that moves the heuristic score by ``weight`` once."""

    name: str
    keywords: Tuple[str, ...]
    weight: float


PRODUCT_TYPE_TABLE: Tuple[ProductTypeKeywords, ...] = (
    ProductTypeKeywords(
        ProductType.ELECTRONICS, ("laptop", "phone", "computer", "device", "gadget")
    ),
    ProductTypeKeywords(
        ProductType.CLOTHING, ("shirt", "pants", "dress", "jacket", "shoes")
    ),
    ProductTypeKeywords(
        ProductType.FURNITURE, ("chair", "table", "desk", "sofa", "cabinet")
    ),
    ProductTypeKeywords(
        ProductType.APPLIANCES, ("refrigerator", "washer", "dryer", "dishwasher")
    ),
    ProductTypeKeywords(
        ProductType.FOOD, ("organic", "snack", "beverage", "food", "drink")
    ),
)

MATERIAL_TRIGGERS: Tuple[str, ...] = (
    "made from",
    "made of",
    "material:",
    "materials:",
    "contains",
    "using",
    "constructed with",
)

CERTIFICATION_TRIGGERS: Tuple[str, ...] = (
    "certified",
    "certification:",
    "compliant with",
    "approved by",
    "meets",
    "standards",
)

STOP_WORDS = frozenset(
    {"a", "an", "and", "the", "with", "by", "for", "in", "on", "at", "to", "of"}
)

# Default draw when a listing states no wattage.
DEFAULT_ENERGY_WATTS = {
    ProductType.ELECTRONICS: 50.0,
    ProductType.APPLIANCES: 500.0,
}

POSITIVE_FAMILIES: Tuple[KeywordFamily, ...] = (
    KeywordFamily(
        "recycled_materials",
        ("recycled", "reclaimed", "upcycled", "repurposed"),
        0.1,
    ),
    KeywordFamily(
        "sustainable_materials",
        (
            "bamboo",
            "hemp",
            "organic",
            "sustainable",
            "biodegradable",
            "compostable",
            "renewable",
        ),
        0.1,
    ),
    KeywordFamily(
        "energy_certifications",
        ("energy star", "energy efficient", "low power", "solar powered"),
        0.1,
    ),
    KeywordFamily(
        "eco_certifications",
        (
            "fair trade",
            "fsc",
            "ecolabel",
            "green seal",
            "rainforest alliance",
            "carbon neutral",
            "zero waste",
            "eco-friendly",
            "eco friendly",
        ),
        0.1,
    ),
    KeywordFamily(
        "durability",
        ("repairable", "modular", "replaceable", "lifetime warranty", "durable"),
        0.1,
    ),
)

NEGATIVE_FAMILIES: Tuple[KeywordFamily, ...] = (
    KeywordFamily(
        "synthetic_materials",
        ("plastic", "synthetic", "pvc", "polyester", "petroleum-based", "toxic"),
        -0.1,
    ),
    KeywordFamily(
        "disposable",
        ("disposable", "single use", "single-use", "non-recyclable"),
        -0.1,
    ),
)

RECYCLED_KEYWORDS: Tuple[str, ...] = ("recycled", "reclaimed", "upcycled", "repurposed")
PACKAGING_KEYWORDS: Tuple[str, ...] = ("biodegradable", "compostable", "recyclable", "minimal")
REPAIR_KEYWORDS: Tuple[str, ...] = ("modular", "replaceable", "serviceable", "repairable")
SUSTAINABLE_MATERIALS: Tuple[str, ...] = ("bamboo", "hemp", "organic", "recycled")
UNSUSTAINABLE_MATERIALS: Tuple[str, ...] = ("plastic", "synthetic", "pvc")

RECOGNISED_CERTIFICATIONS: Tuple[str, ...] = (
    "energy star",
    "fair trade",
    "organic",
    "fsc",
    "rainforest alliance",
    "ecolabel",
    "green seal",
)
