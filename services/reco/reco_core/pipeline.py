from __future__ import annotations

import logging
import threading
from typing import Any

from .config import CONFIG, PipelineConfig
from .errors import ErrorKind, ParseError, PipelineError
from .extract import extract_json
from .fallbacks import fallback_gifts, fallback_quote
from .gemini import GeminiClient
from .normalize import normalize_gifts, normalize_quote
from .prompts import build_prompt
from .records import (
    BuiltPrompt,
    GiftRecommendation,
    PipelineResult,
    ProductAnalysis,
    ProductQuote,
    RecommendationRequest,
    ResponseShape,
    TextQuery,
)

logger = logging.getLogger(__name__)


class RecommendationPipeline:
    """Prompt -> Gemini -> extract -> normalize, with fallback data on bad replies.

    Precondition failures (missing key, empty input) and terminal call
    failures (exhausted 429 retries, other HTTP errors, empty completion)
    come back as a failed PipelineResult. Only an unusable reply on an
    otherwise successful call is replaced with fallback records.
    """

    def __init__(self, config: PipelineConfig | None = None, client: GeminiClient | None = None) -> None:
        self.config = config or CONFIG
        self.client = client or GeminiClient(self.config)

    def recommend_gifts(
        self, query: str, cancel: threading.Event | None = None
    ) -> PipelineResult[list[GiftRecommendation]]:
        return self.run(TextQuery(query=query), cancel=cancel)

    def quote_product(
        self,
        image_data: str | None = None,
        description: str | None = None,
        cancel: threading.Event | None = None,
    ) -> PipelineResult[ProductQuote]:
        return self.run(ProductAnalysis(image_data=image_data, description=description), cancel=cancel)

    def run(self, request: RecommendationRequest, cancel: threading.Event | None = None) -> PipelineResult[Any]:
        if not self.config.api_key:
            logger.error("pipeline_missing_api_key")
            return PipelineResult.failure(
                ErrorKind.CONFIGURATION,
                "Gemini API key is not configured. Set GEMINI_API_KEY in the environment.",
            )

        try:
            prompt = build_prompt(request, gift_count=self.config.gift_count)
        except PipelineError as exc:
            logger.info("pipeline_rejected kind=%s message=%s", exc.kind.value, exc)
            return PipelineResult.failure(exc.kind, str(exc))
        logger.info("pipeline_built call_type=%s has_image=%s", prompt.call_type.value, prompt.inline_image is not None)

        try:
            reply = self.client.generate(prompt, cancel=cancel)
        except PipelineError as exc:
            logger.warning("pipeline_call_failed kind=%s message=%s", exc.kind.value, exc)
            return PipelineResult.failure(exc.kind, str(exc))
        logger.info("pipeline_reply_received chars=%d", len(reply))

        try:
            value = self._decode(prompt, reply)
        except ParseError as exc:
            logger.warning("pipeline_fallback call_type=%s reason=%s", prompt.call_type.value, exc)
            return PipelineResult.success(self._fallback(prompt), used_fallback=True)

        logger.info("pipeline_done call_type=%s", prompt.call_type.value)
        return PipelineResult.success(value)

    def _decode(self, prompt: BuiltPrompt, reply: str) -> Any:
        parsed = extract_json(reply, prompt.shape)
        if parsed is None:
            raise ParseError("No JSON payload of the expected shape in the model reply")

        if prompt.shape == ResponseShape.ARRAY:
            gifts = normalize_gifts(parsed, limit=self.config.gift_count)
            if not gifts:
                raise ParseError("Model returned an empty recommendation list")
            return gifts
        return normalize_quote(parsed)

    @staticmethod
    def _fallback(prompt: BuiltPrompt) -> Any:
        if prompt.shape == ResponseShape.ARRAY:
            return fallback_gifts()
        return fallback_quote()
