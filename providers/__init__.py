"""Transport contract for the remote message service."""

from .base import Transport
from .exceptions import APIError, ForbiddenError, ProviderError, RateLimitError
from .rate_limit import RequestLimiter

__all__ = [
    "APIError",
    "ForbiddenError",
    "ProviderError",
    "RateLimitError",
    "RequestLimiter",
    "Transport",
]
