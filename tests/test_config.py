"""
Tests for configuration module.
"""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from recordcache.config import Settings, clear_settings_cache, get_settings


class TestSettingsValidation:
    """Tests for Settings validation."""

    def test_settings_loads_from_env(self, mock_env_vars: dict[str, str]) -> None:
        """Test that settings correctly loads from environment variables."""
        settings = get_settings()

        assert settings.ALL_ITEMS_CACHE_MS == 30000
        assert settings.SINGLE_ITEM_CACHE_MS == 5000
        assert settings.HTTP_TIMEOUT_SECONDS == 5.0
        assert settings.HTTP_MAX_ATTEMPTS == 2
        assert settings.LOG_LEVEL == "DEBUG"

    def test_defaults(self) -> None:
        """Test defaults when nothing is configured."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.ALL_ITEMS_CACHE_MS == 60000
        assert settings.SINGLE_ITEM_CACHE_MS == 60000
        assert settings.BACKEND_BASE_URL is None
        assert settings.HTTP_MAX_ATTEMPTS == 3
        assert settings.DEMO_LATENCY_MS == 0
        assert settings.LOG_LEVEL == "INFO"

    def test_negative_ttl_rejected(self) -> None:
        """Test that TTL windows must be non-negative."""
        with patch.dict(os.environ, {"ALL_ITEMS_CACHE_MS": "-1"}, clear=True):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    def test_zero_ttl_allowed(self) -> None:
        """Test that a zero TTL (always refetch) is accepted."""
        with patch.dict(os.environ, {"SINGLE_ITEM_CACHE_MS": "0"}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.SINGLE_ITEM_CACHE_MS == 0

    def test_max_attempts_bounds(self) -> None:
        """Test that HTTP_MAX_ATTEMPTS must be between 1 and 10."""
        with patch.dict(os.environ, {"HTTP_MAX_ATTEMPTS": "0"}, clear=True):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    def test_base_url_normalized(self, mock_env_vars: dict[str, str]) -> None:
        """Test that trailing slashes are stripped from the base URL."""
        assert get_settings().BACKEND_BASE_URL == "https://api.example.com/v1"

    def test_base_url_requires_http_scheme(self) -> None:
        """Test that BACKEND_BASE_URL must be an http(s) URL."""
        with patch.dict(os.environ, {"BACKEND_BASE_URL": "ftp://example.com"}, clear=True):
            with pytest.raises(ValidationError) as exc_info:
                Settings(_env_file=None)
        assert "http" in str(exc_info.value)

    def test_blank_base_url_is_none(self) -> None:
        """Test that an empty BACKEND_BASE_URL counts as unset."""
        with patch.dict(os.environ, {"BACKEND_BASE_URL": "  "}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.BACKEND_BASE_URL is None


class TestSettingsHelpers:
    """Tests for Settings helpers."""

    def test_cache_options(self, mock_env_vars: dict[str, str]) -> None:
        """Test building CacheOptions from settings."""
        options = get_settings().cache_options(lambda org: org["id"])

        assert options.all_items_cache_ms == 30000
        assert options.single_item_cache_ms == 5000
        assert options.get_uid({"id": 7}) == 7

    def test_display_lists_every_setting(self, mock_env_vars: dict[str, str]) -> None:
        """Test that display() covers all settings."""
        display = get_settings().display()

        assert display["BACKEND_BASE_URL"] == "https://api.example.com/v1"
        assert set(display) == {
            "ALL_ITEMS_CACHE_MS",
            "SINGLE_ITEM_CACHE_MS",
            "BACKEND_BASE_URL",
            "HTTP_TIMEOUT_SECONDS",
            "HTTP_MAX_ATTEMPTS",
            "DEMO_LATENCY_MS",
            "LOG_LEVEL",
        }


class TestSettingsCache:
    """Tests for the settings singleton."""

    def test_get_settings_is_cached(self, mock_env_vars: dict[str, str]) -> None:
        """Test that get_settings returns the same instance."""
        assert get_settings() is get_settings()

    def test_clear_settings_cache(self, mock_env_vars: dict[str, str]) -> None:
        """Test that clearing the cache picks up new environment values."""
        first = get_settings()
        with patch.dict(os.environ, {"ALL_ITEMS_CACHE_MS": "1234"}):
            clear_settings_cache()
            second = get_settings()

        assert second is not first
        assert second.ALL_ITEMS_CACHE_MS == 1234
