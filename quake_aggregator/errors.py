"""Exception types raised across the aggregator."""

from __future__ import annotations

from typing import Optional


class QuakeAggregatorError(Exception):
    """Base class for aggregator failures."""


class FormatError(QuakeAggregatorError, ValueError):
    """Raised when a listing date or numeric field cannot be parsed."""

    def __init__(self, message: str, raw_text: Optional[str] = None):
        super().__init__(message)
        self.raw_text = raw_text


class UnrecognizedIntensityError(QuakeAggregatorError, ValueError):
    """Raised when an intensity code is outside the I..X vocabulary."""

    def __init__(self, code: str):
        super().__init__(f"Invalid intensity: {code!r}")
        self.code = code


class UpstreamUnavailable(QuakeAggregatorError):
    """Raised when an upstream page answers with a non-success status or cannot be reached."""

    def __init__(self, url: str, status_code: Optional[int] = None, reason: Optional[str] = None):
        detail = f"HTTP {status_code}" if status_code is not None else (reason or "transport failure")
        super().__init__(f"{url}: {detail}")
        self.url = url
        self.status_code = status_code
        self.reason = reason


class ServiceUnavailable(QuakeAggregatorError):
    """Raised when neither tracked month has ever produced usable data."""

    status_code = 503

    def __init__(self, message: str = "Earthquake data temporarily unavailable"):
        super().__init__(message)


class SchemaError(QuakeAggregatorError, ValueError):
    """Raised when a collection payload does not match the canonical schema."""

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.errors = errors or []
