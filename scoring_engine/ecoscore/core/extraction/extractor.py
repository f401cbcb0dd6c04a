"""Derive sustainability features from scraped product text."""

import re
from typing import Iterator, List, Set

from ecoscore.core.extraction.keywords import (
    CERTIFICATION_TRIGGERS,
    DEFAULT_ENERGY_WATTS,
    MATERIAL_TRIGGERS,
    PRODUCT_TYPE_TABLE,
    STOP_WORDS,
)
from ecoscore.core.models import FeatureVector, ProductType, RawProduct

MAX_CANDIDATES_PER_MATCH = 3
MATERIAL_WINDOW_CHARS = 100
CERTIFICATION_WINDOW_CHARS = 40

KILOGRAMS_PER_UNIT = {
    "kg": 1.0,
    "kilogram": 1.0,
    "kilograms": 1.0,
    "g": 0.001,
    "gram": 0.001,
    "grams": 0.001,
    "lb": 0.45359237,
    "lbs": 0.45359237,
    "pound": 0.45359237,
    "pounds": 0.45359237,
    "oz": 0.0283495,
    "ounce": 0.0283495,
    "ounces": 0.0283495,
}

WEIGHT_PATTERN = re.compile(
    r"(?<![\d.])(\d+(?:\.\d+)?)\s*"
    r"(kilograms?|kg|grams?|g|pounds?|lbs?|ounces?|oz)\b",
    re.IGNORECASE,
)
ENERGY_PATTERN = re.compile(
    r"(?<![\d.])(\d+(?:\.\d+)?)\s*(kilowatts?|kw|watts?|w)\b",
    re.IGNORECASE,
)
TOKEN_SPLIT = re.compile(r"[\s,;]+")
TOKEN_STRIP = ".:;!?()[]{}\"'"


def _tokens(segment: str) -> List[str]:
    words = (word.strip(TOKEN_STRIP) for word in TOKEN_SPLIT.split(segment))
    return [word for word in words if word and word not in STOP_WORDS]


def _occurrences(text: str, phrase: str) -> Iterator[int]:
    index = text.find(phrase)
    while index != -1:
        yield index
        index = text.find(phrase, index + len(phrase))


class FeatureExtractor:
    """Turns a :class:`RawProduct` into a :class:`FeatureVector`.

    Extraction is pure and never raises: anything that cannot be parsed
    falls back to a zero or empty default.
    """

    def extract(self, product: RawProduct) -> FeatureVector:
        summary_text = f"{product.title} {product.description}".lower()
        full_text = self._full_text(product)
        product_type = self.detect_product_type(summary_text)
        return FeatureVector(
            product_type=product_type,
            materials=self.extract_materials(full_text),
            certifications=self.extract_certifications(full_text),
            weight=self.extract_weight(full_text),
            energy_consumption=self.extract_energy(full_text, product_type),
            price=max(float(product.price), 0.0),
            title=product.title,
            description=product.description,
        )

    @staticmethod
    def _full_text(product: RawProduct) -> str:
        parts = [product.title, product.description]
        for key, value in (product.specifications or {}).items():
            parts.append(f"{key}: {value}")
        return " ".join(parts).lower()

    @staticmethod
    def detect_product_type(text: str) -> ProductType:
        """First table entry with a keyword contained in ``text`` wins."""
        for entry in PRODUCT_TYPE_TABLE:
            if any(keyword in text for keyword in entry.keywords):
                return entry.product_type
        return ProductType.OTHER

    @staticmethod
    def extract_materials(text: str) -> Set[str]:
        materials: Set[str] = set()
        for trigger in MATERIAL_TRIGGERS:
            for index in _occurrences(text, trigger):
                start = index + len(trigger)
                window = text[start : start + MATERIAL_WINDOW_CHARS]
                materials.update(_tokens(window)[:MAX_CANDIDATES_PER_MATCH])
        return materials

    @staticmethod
    def extract_certifications(text: str) -> Set[str]:
        """Collect the phrases around each certification trigger.

        Per match: the two words before the trigger ("energy star certified"),
        then the two words after it as a phrase and the first of them alone
        ("certified organic cotton").
        """
        certifications: Set[str] = set()
        for trigger in CERTIFICATION_TRIGGERS:
            for index in _occurrences(text, trigger):
                before = _tokens(text[max(0, index - CERTIFICATION_WINDOW_CHARS) : index])
                end = index + len(trigger)
                after = _tokens(text[end : end + CERTIFICATION_WINDOW_CHARS])
                candidates = []
                if before:
                    candidates.append(" ".join(before[-2:]))
                if after:
                    candidates.append(" ".join(after[:2]))
                    candidates.append(after[0])
                certifications.update(candidates[:MAX_CANDIDATES_PER_MATCH])
        return certifications

    @staticmethod
    def extract_weight(text: str) -> float:
        """Return the first stated weight in kilograms, or 0."""
        match = WEIGHT_PATTERN.search(text)
        if match is None:
            return 0.0
        value = float(match.group(1))
        return value * KILOGRAMS_PER_UNIT[match.group(2).lower()]

    @staticmethod
    def extract_energy(text: str, product_type: ProductType) -> float:
        """Return the first stated power draw in watts, else a per-type estimate."""
        match = ENERGY_PATTERN.search(text)
        if match is None:
            return DEFAULT_ENERGY_WATTS.get(product_type, 0.0)
        value = float(match.group(1))
        unit = match.group(2).lower()
        return value * 1000.0 if unit.startswith("k") else value
