# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Configuration settings for the VAST stitcher."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

MAX_WRAPPER_DEPTH = 10
DEFAULT_FETCH_TIMEOUT_SECONDS = 3.0


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VAST_",
        case_sensitive=False,
        extra="ignore",
    )

    # Content fetching
    fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS
    samples_dir: str = "samples"
    user_agent: str = "vast-stitcher/0.1"

    # Wrapper chain traversal
    max_wrapper_depth: int = MAX_WRAPPER_DEPTH
    default_vast_version: str = "4.0"  # Used for the synthetic empty result

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
