"""
Pytest configuration and fixtures for record cache tests.
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Generator
from unittest.mock import patch

import pytest

from recordcache.backends.memory import InMemoryBackend, demo_orgs
from recordcache.cache.store import CacheStore
from recordcache.config import clear_settings_cache
from recordcache.types import CacheOptions


class FakeClock:
    """Manually advanced clock for deterministic TTL tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, ms: int) -> None:
        self.now = self.now + timedelta(milliseconds=ms)


def org_uid(org: dict[str, Any]) -> int:
    return org["id"]


@pytest.fixture
def clock() -> FakeClock:
    """Provide a fake clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def backend() -> InMemoryBackend:
    """Provide the demo organisation backend (Org 1..Org 4)."""
    return InMemoryBackend(demo_orgs())


@pytest.fixture
def options() -> CacheOptions[dict[str, Any]]:
    """Provide one-minute TTL windows keyed on the org id."""
    return CacheOptions(
        all_items_cache_ms=60_000,
        single_item_cache_ms=60_000,
        get_uid=org_uid,
    )


@pytest.fixture
def store(
    backend: InMemoryBackend,
    options: CacheOptions[dict[str, Any]],
    clock: FakeClock,
) -> CacheStore[dict[str, Any]]:
    """Provide an empty store over the demo backend."""
    return CacheStore(backend, options, clock=clock, name="orgs")


@pytest.fixture
def mock_env_vars() -> Generator[dict[str, str], None, None]:
    """Provide mock environment variables for testing."""
    env_vars = {
        "ALL_ITEMS_CACHE_MS": "30000",
        "SINGLE_ITEM_CACHE_MS": "5000",
        "BACKEND_BASE_URL": "https://api.example.com/v1/",
        "HTTP_TIMEOUT_SECONDS": "5",
        "HTTP_MAX_ATTEMPTS": "2",
        "DEMO_LATENCY_MS": "0",
        "LOG_LEVEL": "DEBUG",
    }

    with patch.dict(os.environ, env_vars, clear=False):
        clear_settings_cache()
        yield env_vars


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Automatically reset settings cache before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
