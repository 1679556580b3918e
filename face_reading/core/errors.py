# face_reading/core/errors.py
from __future__ import annotations


class FaceReadingError(Exception):
    """Errors that surface to the HTTP caller with their own status code."""

    status_code = 500
    error_code = "FACE_READING_FAILED"

    def __init__(self, message: str, *, error_code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code


class InvalidImageError(FaceReadingError):
    status_code = 400
    error_code = "IMAGE_INVALID"


class RateLimitExceededError(FaceReadingError):
    status_code = 429
    error_code = "RATE_LIMITED"


class ConfigurationError(FaceReadingError):
    status_code = 500
    error_code = "CONFIGURATION_ERROR"


class NarrativeGenerationError(RuntimeError):
    """Raised by narrative adapters; the orchestrator recovers with the fallback templates."""

    def __init__(self, message: str, *, reason: str) -> None:
        super().__init__(message)
        self.reason = reason
