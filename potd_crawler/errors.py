"""Error taxonomy shared by the acquisition pipeline."""

from __future__ import annotations

from datetime import date


class PotdError(Exception):
    """Base class for all pipeline errors."""


class FetchError(PotdError):
    """Network or transport failure; retryable under the resilience policy."""

    def __init__(self, message: str, url: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ExtractionError(PotdError):
    """The expected content region or image reference is missing from the page."""


class ImageDecodeError(PotdError):
    """Image payload is corrupt or in an unsupported format."""


class RasterConversionError(ImageDecodeError):
    """A vector payload could not be rendered to a bitmap."""


class SummarizationError(PotdError):
    """The summarizer failed to produce a short description."""


class ConflictError(PotdError):
    """A record for the given date already exists."""

    def __init__(self, run_date: date) -> None:
        super().__init__(f"Record already exists for {run_date.isoformat()}")
        self.run_date = run_date


class CircuitOpenError(PotdError):
    """The circuit breaker is open; the run was not attempted."""


class RateLimitedError(PotdError):
    """The rate limiter rejected the run."""


__all__ = [
    "CircuitOpenError",
    "ConflictError",
    "ExtractionError",
    "FetchError",
    "ImageDecodeError",
    "PotdError",
    "RasterConversionError",
    "RateLimitedError",
    "SummarizationError",
]
