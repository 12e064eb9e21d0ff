"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class WeatherChatError(Exception):
    """Base exception for the weather chat backend."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(WeatherChatError):
    """Missing or invalid input."""

    pass


class UpstreamError(WeatherChatError):
    """The weather provider failed or returned an unexpected payload."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Any] = None):
        super().__init__(message, details=details)
        self.status_code = status_code


class LLMError(WeatherChatError):
    """LLM-related error."""

    pass


class OverloadError(LLMError):
    """The text generation service is overloaded or rate limiting us."""

    pass


class GenerationError(LLMError):
    """Text generation failed for a reason that is not retried."""

    def __init__(self, message: str, attempts: int = 1, details: Optional[Any] = None):
        super().__init__(message, details=details)
        self.attempts = attempts


OVERLOAD_MARKERS = (
    "overloaded",
    "rate limit",
    "ratelimit",
    "rate_limit",
    "too many requests",
    "resource exhausted",
    "resource_exhausted",
    "429",
    "503",
    "unavailable",
)


def is_overload_error(error: BaseException) -> bool:
    """True for overload / rate-limit failures, the only class worth retrying."""
    if isinstance(error, OverloadError):
        return True
    if isinstance(error, GenerationError):
        return False
    text = str(error).lower()
    return any(marker in text for marker in OVERLOAD_MARKERS)
