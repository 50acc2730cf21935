"""Configuration for the message client."""

from .mutation import MutationSettings, RateLimitPolicy
from .settings import Settings, get_settings

__all__ = ["MutationSettings", "RateLimitPolicy", "Settings", "get_settings"]
