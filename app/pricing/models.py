"""Pricing analysis result types."""

from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


MarketTrend = Literal["up", "down", "stable"]


class PricingInput(BaseModel):
    """Free-text description of an item to price."""
    title: str
    description: str = ""
    category: str
    condition: str


class PricingSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    platform: str
    price: float
    title: Optional[str] = None
    url: str


class PriceRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: int
    max: int


class PricingResult(BaseModel):
    """Output of the pricing engine. Immutable once built."""
    model_config = ConfigDict(frozen=True)

    price: int
    confidence: int = Field(ge=0, le=100)
    reason: str
    market_trend: MarketTrend = "stable"
    sources: List[PricingSource] = Field(default_factory=list)
    price_range: PriceRange
