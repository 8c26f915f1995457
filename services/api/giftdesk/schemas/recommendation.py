from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GiftSearchRequest(CamelModel):
    query: str = Field(max_length=2000)


class ProductQuoteRequest(CamelModel):
    image_base64: str | None = None
    description: str | None = Field(default=None, max_length=2000)


class GeminiDispatchRequest(CamelModel):
    type: Literal["gifts", "product-quote"]
    query: str | None = Field(default=None, max_length=2000)
    image_base64: str | None = None
    description: str | None = Field(default=None, max_length=2000)


class GiftRecommendationOut(CamelModel):
    title: str
    description: str
    category: str
    price_range: str
    rating: float
    features: list[str]
    suitable_for: list[str]
    availability: str
    image_url: str


class ProductQuoteOut(CamelModel):
    product_name: str
    suggested_price: str
    market_comparison: str
    confidence: int
    recommendations: list[str]
    category: str
    features: list[str]
    competitor_prices: list[str]


class GiftSearchResponse(CamelModel):
    recommendations: list[GiftRecommendationOut]
    used_fallback: bool = False


class ProductQuoteResponse(CamelModel):
    quote: ProductQuoteOut
    used_fallback: bool = False


class QuotaOut(CamelModel):
    search_count: int
    can_search: bool
    requires_auth: bool
