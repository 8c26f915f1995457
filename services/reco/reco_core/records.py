from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar, Union

from .errors import ErrorKind

T = TypeVar("T")


class ResponseShape(str, Enum):
    ARRAY = "array"
    OBJECT = "object"


class CallType(str, Enum):
    GIFT_SEARCH = "gift_search"
    PRODUCT_QUOTE = "product_quote"


@dataclass(slots=True, frozen=True)
class TextQuery:
    query: str


@dataclass(slots=True, frozen=True)
class ProductAnalysis:
    image_data: str | None = None
    description: str | None = None


RecommendationRequest = Union[TextQuery, ProductAnalysis]


@dataclass(slots=True, frozen=True)
class InlineImage:
    mime_type: str
    data: str


@dataclass(slots=True, frozen=True)
class BuiltPrompt:
    prompt_text: str
    shape: ResponseShape
    call_type: CallType
    inline_image: InlineImage | None = None


@dataclass(slots=True)
class GiftRecommendation:
    title: str
    description: str
    category: str
    price_range: str
    rating: float
    features: list[str] = field(default_factory=list)
    suitable_for: list[str] = field(default_factory=list)
    availability: str = ""
    image_url: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "priceRange": self.price_range,
            "rating": self.rating,
            "features": list(self.features),
            "suitableFor": list(self.suitable_for),
            "availability": self.availability,
            "imageUrl": self.image_url,
        }


@dataclass(slots=True)
class ProductQuote:
    product_name: str
    suggested_price: str
    market_comparison: str
    confidence: int
    recommendations: list[str] = field(default_factory=list)
    category: str = ""
    features: list[str] = field(default_factory=list)
    competitor_prices: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "productName": self.product_name,
            "suggestedPrice": self.suggested_price,
            "marketComparison": self.market_comparison,
            "confidence": self.confidence,
            "recommendations": list(self.recommendations),
            "category": self.category,
            "features": list(self.features),
            "competitorPrices": list(self.competitor_prices),
        }


@dataclass
class PipelineResult(Generic[T]):
    """Outcome of one pipeline run: either a value or a typed failure."""

    value: T | None = None
    error_kind: ErrorKind | None = None
    message: str | None = None
    used_fallback: bool = False

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    @classmethod
    def success(cls, value: T, used_fallback: bool = False) -> "PipelineResult[T]":
        return cls(value=value, used_fallback=used_fallback)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "PipelineResult[T]":
        return cls(error_kind=kind, message=message)
