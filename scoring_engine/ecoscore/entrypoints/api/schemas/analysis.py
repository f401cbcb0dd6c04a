"""Schemas for the analysis API."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ecoscore.core.models import RawProduct, SellerInfo


class AnalysisRequest(BaseModel):
    """The JSON request body for the analysis endpoint."""

    title: str = Field(min_length=1)
    description: str = ""
    price: float = Field(default=0.0, ge=0)
    url: str = ""
    specifications: Optional[Dict[str, str]] = None
    seller: Optional[SellerInfo] = None
    images: Optional[List[str]] = None

    def to_product(self) -> RawProduct:
        return RawProduct(**self.model_dump())


class FeedbackRequest(BaseModel):
    """A product together with its known sustainability score."""

    product: AnalysisRequest
    actual_score: float = Field(ge=0.0, le=1.0)
