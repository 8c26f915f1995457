from __future__ import annotations

from fastapi import HTTPException

from giftdesk.core.config import settings
from reco_core import ErrorKind, PipelineConfig, PipelineResult, RecommendationPipeline

# 499 follows the nginx "client closed request" convention.
FAILURE_STATUS = {
    ErrorKind.CONFIGURATION: 503,
    ErrorKind.INPUT: 400,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.TRANSPORT: 502,
    ErrorKind.EMPTY_COMPLETION: 502,
    ErrorKind.PARSE: 502,
    ErrorKind.CANCELLED: 499,
}


def pipeline_config_from_settings() -> PipelineConfig:
    return PipelineConfig(
        api_key=settings.gemini_api_key.strip(),
        model=settings.gemini_model,
        base_url=settings.gemini_base_url,
        timeout_sec=settings.gemini_timeout_sec,
        max_retries=settings.gemini_max_retries,
        initial_backoff_sec=settings.gemini_initial_backoff_sec,
        safety_threshold=settings.gemini_safety_threshold,
        gift_count=settings.gift_count,
    )


_global_pipeline: RecommendationPipeline | None = None


def get_recommendation_pipeline() -> RecommendationPipeline:
    global _global_pipeline
    if _global_pipeline is None:
        _global_pipeline = RecommendationPipeline(pipeline_config_from_settings())
    return _global_pipeline


def raise_for_failure(result: PipelineResult) -> None:
    if result.ok:
        return
    kind = result.error_kind or ErrorKind.TRANSPORT
    raise HTTPException(
        status_code=FAILURE_STATUS.get(kind, 500),
        detail={"kind": kind.value, "message": result.message or "Recommendation request failed"},
    )
