"""Product records flowing through the scoring pipeline."""

from enum import Enum
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field


class ProductType(str, Enum):
    """Coarse product categories recognised by the extractor."""

    ELECTRONICS = "electronics"
    CLOTHING = "clothing"
    FURNITURE = "furniture"
    APPLIANCES = "appliances"
    FOOD = "food"
    OTHER = "other"


class SellerInfo(BaseModel):
    """Seller details scraped alongside the product."""

    model_config = ConfigDict(frozen=True)

    name: str
    rating: float
    location: Optional[str] = None


class RawProduct(BaseModel):
    """Product data as scraped from a listing page."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str = ""
    price: float = 0.0
    url: str = ""
    specifications: Optional[Dict[str, str]] = None
    seller: Optional[SellerInfo] = None
    images: Optional[List[str]] = None


class FeatureVector(BaseModel):
    """Sustainability-relevant attributes derived from a raw product."""

    product_type: ProductType = ProductType.OTHER
    materials: Set[str] = Field(default_factory=set)
    certifications: Set[str] = Field(default_factory=set)
    weight: float = Field(default=0.0, ge=0.0, description="Kilograms.")
    energy_consumption: float = Field(default=0.0, ge=0.0, description="Watts.")
    price: float = 0.0
    title: str = ""
    description: str = ""

    def summary(self) -> Dict[str, object]:
        """Compact description used in error log context."""
        return {
            "title": self.title,
            "product_type": self.product_type.value,
            "price": self.price,
        }


class TrainingSample(BaseModel):
    """A labeled example kept for incremental retraining."""

    features: FeatureVector
    label: float = Field(ge=0.0, le=1.0)
