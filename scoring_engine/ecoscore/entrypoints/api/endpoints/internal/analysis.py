"""Analysis endpoints exposing sustainability scores."""

from fastapi import APIRouter, Depends

from ecoscore.core.analysis.analyzer import ProductAnalyzer
from ecoscore.core.models import MetricsSnapshot, ProductAnalysis
from ecoscore.entrypoints.api.schemas.analysis import AnalysisRequest, FeedbackRequest
from ecoscore.setup.services import get_analyzer

router = APIRouter(tags=["Analysis"])


@router.post("", response_model=ProductAnalysis)
async def analyze(
    request: AnalysisRequest, analyzer: ProductAnalyzer = Depends(get_analyzer)
) -> ProductAnalysis:
    """Score a scraped product and return the full analysis."""

    return await analyzer.analyze(request.to_product())


@router.post("/feedback", response_model=MetricsSnapshot)
async def feedback(
    request: FeedbackRequest, analyzer: ProductAnalyzer = Depends(get_analyzer)
) -> MetricsSnapshot:
    """Record a known score for a product and return the updated metrics."""

    return await analyzer.record_feedback(request.product.to_product(), request.actual_score)
