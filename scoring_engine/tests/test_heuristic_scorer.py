"""Tests for the keyword-weighted fallback scorer."""

import pytest

from ecoscore.core.extraction.extractor import FeatureExtractor
from ecoscore.core.extraction.keywords import KeywordFamily
from ecoscore.core.models import FeatureVector
from ecoscore.core.scoring.heuristic import HeuristicScorer

from fakes import ECO_LAPTOP


def test_eco_laptop_scores_above_base() -> None:
    features = FeatureExtractor().extract(ECO_LAPTOP)
    scorer = HeuristicScorer()

    names = {family.name for family in scorer.matched_families(features)}

    assert names == {"recycled_materials", "energy_certifications"}
    assert scorer.score(features) == pytest.approx(0.7)


def test_score_is_deterministic() -> None:
    features = FeatureVector(
        title="Bamboo toothbrush",
        description="Compostable handle, recycled packaging",
        materials={"bamboo", "nylon"},
    )
    scorer = HeuristicScorer()

    assert len({scorer.score(features) for _ in range(5)}) == 1


def test_family_counts_once() -> None:
    features = FeatureVector(title="recycled recycled reclaimed upcycled")

    assert HeuristicScorer().score(features) == pytest.approx(0.6)


def test_negative_families_lower_the_score() -> None:
    features = FeatureVector(
        title="Disposable cups", description="Single-use plastic cups"
    )

    assert HeuristicScorer().score(features) == pytest.approx(0.3)


def test_no_keywords_returns_base() -> None:
    assert HeuristicScorer().score(FeatureVector(title="Garden hose")) == 0.5


def test_score_is_clamped() -> None:
    families = [KeywordFamily(f"family{i}", ("eco",), 0.2) for i in range(5)]
    scorer = HeuristicScorer(families=families)

    assert scorer.score(FeatureVector(title="eco bottle")) == 1.0
    assert HeuristicScorer(families=[KeywordFamily("bad", ("pvc",), -0.9)]).score(
        FeatureVector(title="pvc hose")
    ) == 0.0
