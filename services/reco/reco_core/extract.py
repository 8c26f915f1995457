from __future__ import annotations

import json
import logging
import re
from typing import Any

from .records import ResponseShape

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```[a-zA-Z0-9_-]*")
_BRACKETS = {
    ResponseShape.ARRAY: ("[", "]", list),
    ResponseShape.OBJECT: ("{", "}", dict),
}


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text or "").strip()


def extract_json(text: str | None, shape: ResponseShape) -> list[Any] | dict[str, Any] | None:
    """Pull the JSON value out of a free-text model reply.

    Takes the span from the first opening bracket to the last closing one, so
    prose or markdown around the payload is ignored. Returns None when nothing
    parseable of the expected shape is found; never raises on bad input.
    """
    opener, closer, expected = _BRACKETS[shape]
    cleaned = strip_code_fences(text or "")
    start = cleaned.find(opener)
    end = cleaned.rfind(closer)
    if start == -1 or end < start:
        logger.warning("extract_no_json shape=%s chars=%d", shape.value, len(cleaned))
        return None

    try:
        value = json.loads(cleaned[start : end + 1])
    except ValueError as exc:
        logger.warning("extract_invalid_json shape=%s error=%s", shape.value, exc)
        return None

    if not isinstance(value, expected):
        logger.warning("extract_wrong_shape expected=%s got=%s", shape.value, type(value).__name__)
        return None
    return value
