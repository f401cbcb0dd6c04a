"""Keyword-weighted fallback scoring."""

from typing import List, Sequence

from ecoscore.core.extraction.keywords import (
    NEGATIVE_FAMILIES,
    POSITIVE_FAMILIES,
    KeywordFamily,
)
from ecoscore.core.models import FeatureVector

BASE_SCORE = 0.5


class HeuristicScorer:
    """Deterministic score used when the model cannot answer.

    Each keyword family contributes its weight at most once, however many of
    its phrases appear.
    """

    def __init__(
        self,
        families: Sequence[KeywordFamily] = POSITIVE_FAMILIES + NEGATIVE_FAMILIES,
        base_score: float = BASE_SCORE,
    ) -> None:
        self.families = tuple(families)
        self.base_score = base_score

    @staticmethod
    def _text(features: FeatureVector) -> str:
        parts = [features.title, features.description]
        parts.extend(sorted(features.materials))
        parts.extend(sorted(features.certifications))
        return " ".join(parts).lower()

    def matched_families(self, features: FeatureVector) -> List[KeywordFamily]:
        text = self._text(features)
        return [
            family
            for family in self.families
            if any(keyword in text for keyword in family.keywords)
        ]

    def score(self, features: FeatureVector) -> float:
        total = self.base_score + sum(
            family.weight for family in self.matched_families(features)
        )
        return max(0.0, min(1.0, round(total, 6)))
