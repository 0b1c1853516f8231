"""
Application settings.

Values come from environment variables prefixed with ``GIFT_`` (or a local
``.env`` file), e.g. ``GIFT_API_URL`` or ``GIFT_MAX_WORKERS``.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration for the GIFT client."""

    model_config = SettingsConfigDict(
        env_prefix="GIFT_",
        env_file=".env",
        extra="ignore",
    )

    app_name: str = "gift-client"
    debug: bool = False
    log_level: str = "INFO"

    api_url: str = "https://gift.uni-goettingen.de/api/extended/"
    versions_url: str = "https://gift.uni-goettingen.de/api/index.php"
    # "latest" is resolved explicitly by callers (see datasources.gift.client.resolve_version)
    gift_version: str = "latest"

    page_size: int = Field(default=10000, gt=0)
    request_timeout: float = Field(default=30, gt=0)
    retry_total: int = Field(default=4, ge=0)
    retry_backoff: float = Field(default=2.0, ge=0)
    max_workers: int = Field(default=4, ge=1)


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
