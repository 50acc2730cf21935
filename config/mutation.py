"""Settings that govern how message mutations react to the remote service."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RateLimitPolicy(StrEnum):
    """What a mutating call does when the remote service rate limits it.

    SURFACE: raise ``RateLimited`` to the caller immediately.
    RETRY_ONCE: wait out ``retry_after`` and retry the request exactly once;
    a second rate limit is raised.
    """

    SURFACE = "surface"
    RETRY_ONCE = "retry_once"


class MutationSettings(BaseModel):
    """Per-client defaults for mutating calls."""

    rate_limit_policy: RateLimitPolicy = RateLimitPolicy.SURFACE
    # Waits longer than this are surfaced even under RETRY_ONCE
    max_retry_after: float = Field(60.0, gt=0.0)

    model_config = ConfigDict(extra="forbid")

    @field_validator("rate_limit_policy", mode="before")
    @classmethod
    def parse_policy(cls, v):
        if isinstance(v, str):
            return v.strip().lower().replace("-", "_")
        return v
