from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable

import httpx

from .config import CONFIG, PipelineConfig
from .errors import Cancelled, ConfigurationError, EmptyCompletion, RateLimited, TransportError
from .records import BuiltPrompt, CallType

logger = logging.getLogger(__name__)

HARM_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)


def backoff_delay(initial_sec: float, attempt: int) -> float:
    """Delay before retry number `attempt` (1-based): initial * 2^(attempt-1)."""
    return initial_sec * (2 ** max(0, attempt - 1))


class GeminiClient:
    """Single-purpose `generateContent` caller with bounded 429 retries."""

    def __init__(
        self,
        config: PipelineConfig | None = None,
        http_client: httpx.Client | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self.config = config or CONFIG
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(timeout=self.config.timeout_sec)
        self._sleep = sleep

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    @property
    def endpoint(self) -> str:
        return f"{self.config.base_url.rstrip('/')}/{self.config.model}:generateContent"

    def build_body(self, prompt: BuiltPrompt) -> dict[str, Any]:
        parts: list[dict[str, Any]] = []
        if prompt.inline_image is not None:
            parts.append(
                {
                    "inline_data": {
                        "mime_type": prompt.inline_image.mime_type,
                        "data": prompt.inline_image.data,
                    }
                }
            )
        parts.append({"text": prompt.prompt_text})

        max_tokens = (
            self.config.quote_max_output_tokens
            if prompt.call_type == CallType.PRODUCT_QUOTE
            else self.config.gift_max_output_tokens
        )
        return {
            "contents": [{"parts": parts}],
            "generationConfig": {
                "temperature": self.config.temperature,
                "topK": self.config.top_k,
                "topP": self.config.top_p,
                "maxOutputTokens": max_tokens,
                "candidateCount": 1,
            },
            "safetySettings": [
                {"category": category, "threshold": self.config.safety_threshold}
                for category in HARM_CATEGORIES
            ],
        }

    def generate(self, prompt: BuiltPrompt, cancel: threading.Event | None = None) -> str:
        """POST the prompt and return the completion text.

        Only HTTP 429 is retried, with exponential backoff. Any other non-2xx
        response or network failure raises TransportError straight away.
        """
        if not self.config.api_key:
            raise ConfigurationError(
                "Gemini API key is not configured. Set GEMINI_API_KEY in the environment."
            )

        body = self.build_body(prompt)
        attempts = max(0, self.config.max_retries) + 1
        for attempt in range(1, attempts + 1):
            _raise_if_cancelled(cancel)
            logger.info("gemini_call attempt=%d/%d call_type=%s", attempt, attempts, prompt.call_type.value)
            try:
                resp = self._http.post(self.endpoint, params={"key": self.config.api_key}, json=body)
            except httpx.TimeoutException as exc:
                raise TransportError(f"Gemini request timed out after {self.config.timeout_sec:.0f}s") from exc
            except httpx.HTTPError as exc:
                raise TransportError(f"Gemini request failed: {type(exc).__name__}") from exc

            if resp.status_code == 429:
                if attempt >= attempts:
                    logger.warning("gemini_rate_limit_exhausted attempts=%d", attempt)
                    raise RateLimited(
                        f"Gemini API rate limit persisted after {attempt} attempts. Please wait and try again.",
                        attempts=attempt,
                    )
                delay = backoff_delay(self.config.initial_backoff_sec, attempt)
                logger.warning("gemini_rate_limited attempt=%d delay_sec=%.1f", attempt, delay)
                self._wait(delay, cancel)
                continue

            if not resp.is_success:
                detail = _error_detail(resp)
                logger.error("gemini_http_error status=%d detail=%s", resp.status_code, detail)
                raise TransportError(
                    f"Gemini API error: {resp.status_code} {resp.reason_phrase} - {detail}",
                    status_code=resp.status_code,
                )

            return _completion_text(resp)

        raise RuntimeError("Gemini retry loop exited unexpectedly")

    def _wait(self, delay: float, cancel: threading.Event | None) -> None:
        if self._sleep is not None:
            self._sleep(delay)
            _raise_if_cancelled(cancel)
        elif cancel is not None:
            if cancel.wait(delay):
                raise Cancelled("Request was cancelled while waiting to retry")
        else:
            time.sleep(delay)


def _raise_if_cancelled(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise Cancelled("Request was cancelled")


def _error_detail(resp: httpx.Response) -> str:
    try:
        payload = resp.json()
    except ValueError:
        return (resp.text or "").strip()[:300] or "no error details"
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return (resp.text or "").strip()[:300] or "no error details"


def _completion_text(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError as exc:
        raise TransportError("Gemini API returned a non-JSON body", status_code=resp.status_code) from exc
    if not isinstance(data, dict):
        data = {}

    candidates = data.get("candidates")
    first = candidates[0] if isinstance(candidates, list) and candidates and isinstance(candidates[0], dict) else {}
    content = first.get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    text = parts[0].get("text") if isinstance(parts, list) and parts and isinstance(parts[0], dict) else None
    if isinstance(text, str) and text.strip():
        return text

    feedback = data.get("promptFeedback")
    reason = (feedback.get("blockReason") if isinstance(feedback, dict) else None) or first.get("finishReason")
    logger.error("gemini_empty_completion reason=%s", reason)
    message = "No content received from Gemini API. The response may have been blocked by safety filters."
    if reason:
        message += f" (reason: {reason})"
    raise EmptyCompletion(message)
