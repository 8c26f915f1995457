from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class PipelineConfig:
    api_key: str = os.getenv("GEMINI_API_KEY", "").strip()
    model: str = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
    base_url: str = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta/models")
    timeout_sec: float = float(os.getenv("GEMINI_TIMEOUT_SEC", "30"))
    max_retries: int = int(os.getenv("GEMINI_MAX_RETRIES", "3"))
    initial_backoff_sec: float = float(os.getenv("GEMINI_INITIAL_BACKOFF_SEC", "1.0"))
    safety_threshold: str = os.getenv("GEMINI_SAFETY_THRESHOLD", "BLOCK_NONE")
    gift_count: int = int(os.getenv("GIFT_COUNT", "4"))

    # Low temperature keeps the structured JSON output reproducible.
    temperature: float = 0.1
    top_k: int = 1
    top_p: float = 0.1
    gift_max_output_tokens: int = 4096
    quote_max_output_tokens: int = 2048


CONFIG = PipelineConfig()
