"""Application settings loaded from the environment and ``.env``."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .mutation import MutationSettings


class Settings(BaseSettings):
    """Settings for the message client."""

    # Our own user id; enables the local author check on edit
    self_user_id: str | None = None

    request_rate_limit: int = Field(50, ge=1)
    request_rate_window: float = Field(1.0, gt=0.0)

    log_file: str = "server.log"

    mutation: MutationSettings = Field(default_factory=MutationSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @field_validator("self_user_id", mode="before")
    @classmethod
    def parse_optional_str(cls, v):
        if v == "":
            return None
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
