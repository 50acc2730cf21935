"""Errors raised by message transports.

Transports translate whatever their wire client raises into these types;
the mutator maps them onto the public error taxonomy in ``messaging.errors``.
"""

from typing import Any


class ProviderError(Exception):
    """Base class for transport-level failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 500,
        raw_error: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.raw_error = raw_error


class ForbiddenError(ProviderError):
    """The remote service refused the request for lack of a capability."""

    def __init__(self, message: str, *, capability: str, raw_error: Any = None):
        super().__init__(message, status_code=403, raw_error=raw_error)
        self.capability = capability


class RateLimitError(ProviderError):
    """The remote service asked us to wait ``retry_after`` seconds."""

    def __init__(self, message: str, *, retry_after: float, raw_error: Any = None):
        super().__init__(message, status_code=429, raw_error=raw_error)
        self.retry_after = max(0.0, float(retry_after))


class APIError(ProviderError):
    """Any other non-success response from the remote service."""
