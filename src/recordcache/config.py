"""
Configuration management using pydantic-settings.

Loads configuration from environment variables and .env files.
Validates TTL windows and transport limits and provides typed access to settings.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Callable, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from recordcache.types import CacheOptions, Uid


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Optional:
        ALL_ITEMS_CACHE_MS: TTL for whole-collection fetches in milliseconds
        SINGLE_ITEM_CACHE_MS: TTL for single-record fetches in milliseconds
        BACKEND_BASE_URL: Base URL of the REST backend
        HTTP_TIMEOUT_SECONDS: Timeout for each HTTP request
        HTTP_MAX_ATTEMPTS: Attempts per HTTP request before giving up
        DEMO_LATENCY_MS: Simulated latency of the in-memory demo backend
        LOG_LEVEL: Logging level
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Cache windows
    ALL_ITEMS_CACHE_MS: int = Field(
        default=60_000, ge=0, description="TTL for whole-collection fetches (ms)"
    )
    SINGLE_ITEM_CACHE_MS: int = Field(
        default=60_000, ge=0, description="TTL for single-record fetches (ms)"
    )

    # HTTP backend
    BACKEND_BASE_URL: str | None = Field(
        default=None, description="Base URL of the REST backend"
    )
    HTTP_TIMEOUT_SECONDS: float = Field(
        default=30.0, gt=0.0, description="Timeout for each HTTP request"
    )
    HTTP_MAX_ATTEMPTS: int = Field(
        default=3, ge=1, le=10, description="Attempts per HTTP request"
    )

    # Demo backend
    DEMO_LATENCY_MS: int = Field(
        default=0, ge=0, description="Simulated latency of the demo backend (ms)"
    )

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )

    @field_validator("BACKEND_BASE_URL")
    @classmethod
    def validate_base_url(cls, v: str | None) -> str | None:
        """Normalize the base URL and require an http(s) scheme."""
        if v is None:
            return None
        v = v.strip()
        if not v:
            return None
        if not v.startswith(("http://", "https://")):
            raise ValueError("BACKEND_BASE_URL must start with http:// or https://")
        return v.rstrip("/")

    def cache_options(self, get_uid: Callable[[Any], Uid]) -> CacheOptions[Any]:
        """Build CacheOptions from the configured TTL windows."""
        return CacheOptions(
            all_items_cache_ms=self.ALL_ITEMS_CACHE_MS,
            single_item_cache_ms=self.SINGLE_ITEM_CACHE_MS,
            get_uid=get_uid,
        )

    def display(self) -> dict[str, str | int | float | None]:
        """Return settings for display."""
        return {
            "ALL_ITEMS_CACHE_MS": self.ALL_ITEMS_CACHE_MS,
            "SINGLE_ITEM_CACHE_MS": self.SINGLE_ITEM_CACHE_MS,
            "BACKEND_BASE_URL": self.BACKEND_BASE_URL,
            "HTTP_TIMEOUT_SECONDS": self.HTTP_TIMEOUT_SECONDS,
            "HTTP_MAX_ATTEMPTS": self.HTTP_MAX_ATTEMPTS,
            "DEMO_LATENCY_MS": self.DEMO_LATENCY_MS,
            "LOG_LEVEL": self.LOG_LEVEL,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If settings are invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
