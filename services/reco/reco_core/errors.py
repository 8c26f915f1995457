from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration_error"
    INPUT = "input_error"
    RATE_LIMITED = "rate_limited"
    TRANSPORT = "transport_error"
    EMPTY_COMPLETION = "empty_completion"
    PARSE = "parse_error"
    CANCELLED = "cancelled"


class PipelineError(RuntimeError):
    """Base class for every failure the recommendation pipeline can report."""

    kind: ErrorKind = ErrorKind.TRANSPORT


class ConfigurationError(PipelineError):
    """The Gemini API key (or another required setting) is missing."""

    kind = ErrorKind.CONFIGURATION


class InputError(PipelineError):
    """The request carries no usable input (empty query, no image or description)."""

    kind = ErrorKind.INPUT


class RateLimited(PipelineError):
    """Gemini kept answering 429 after every retry was spent."""

    kind = ErrorKind.RATE_LIMITED

    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


class TransportError(PipelineError):
    kind = ErrorKind.TRANSPORT

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class EmptyCompletion(PipelineError):
    """Gemini answered 2xx but returned no text, usually because of safety filtering."""

    kind = ErrorKind.EMPTY_COMPLETION


class ParseError(PipelineError):
    kind = ErrorKind.PARSE


class Cancelled(PipelineError):
    kind = ErrorKind.CANCELLED
