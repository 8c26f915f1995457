"""Gift recommendation and product quote pipeline backed by Gemini."""

from .config import PipelineConfig
from .errors import (
    Cancelled,
    ConfigurationError,
    EmptyCompletion,
    ErrorKind,
    InputError,
    ParseError,
    PipelineError,
    RateLimited,
    TransportError,
)
from .gemini import GeminiClient
from .pipeline import RecommendationPipeline
from .records import (
    GiftRecommendation,
    PipelineResult,
    ProductAnalysis,
    ProductQuote,
    RecommendationRequest,
    TextQuery,
)

__all__ = [
    "Cancelled",
    "ConfigurationError",
    "EmptyCompletion",
    "ErrorKind",
    "GeminiClient",
    "GiftRecommendation",
    "InputError",
    "ParseError",
    "PipelineConfig",
    "PipelineError",
    "PipelineResult",
    "ProductAnalysis",
    "ProductQuote",
    "RateLimited",
    "RecommendationPipeline",
    "RecommendationRequest",
    "TextQuery",
    "TransportError",
]
