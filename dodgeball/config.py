"""Configuration settings using pydantic-settings."""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_CHECKPOINT_TIMEOUT_MS = 100
MAX_TIMEOUT = 10000
MAX_RETRY_COUNT = 3


class DodgeballSettings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DODGEBALL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Credentials
    secret_key: Optional[str] = None

    # API
    api_version: str = "v1"
    api_url: str = "https://api.dodgeballhq.com/"
    http_timeout_seconds: float = 30.0

    # Application
    log_level: str = "INFO"
    is_enabled: bool = True


@lru_cache
def get_settings() -> DodgeballSettings:
    """Get cached settings instance."""
    return DodgeballSettings()


class ResolutionConfig(BaseSettings):
    """Configuration for the checkpoint resolution loop.

    Controls the submit-then-poll protocol that turns a pending remote
    verification into a synchronous checkpoint result.
    """

    model_config = SettingsConfigDict(
        env_prefix="DODGEBALL_RESOLVE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_timeout_ms: int = Field(
        default=BASE_CHECKPOINT_TIMEOUT_MS,
        ge=1,
        description="Base polling quantum; first sleep between polls",
    )
    max_timeout_ms: int = Field(
        default=MAX_TIMEOUT,
        ge=1,
        description="Ceiling for the doubling poll interval",
    )
    max_retry_count: int = Field(
        default=MAX_RETRY_COUNT,
        ge=1,
        description="Max submission attempts and max failed polls",
    )


@lru_cache
def get_resolution_config() -> ResolutionConfig:
    """Get cached resolution config instance."""
    return ResolutionConfig()
