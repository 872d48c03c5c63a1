"""
Core types for the record cache.

This module defines the data structures shared by the store and its bindings:
- Frozen dataclasses for cache entries and construction-time options
- Result types returned by the store's *_result operations
- Event types delivered to change listeners
- Helper functions for timestamps
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Generic, TypeVar, Union

from recordcache.exceptions import ConfigurationError

T = TypeVar("T")

Uid = Union[str, int]
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Get current UTC time with timezone info."""
    return datetime.now(timezone.utc)


def has_expired(last_fetched: datetime, ttl_ms: int, now: datetime) -> bool:
    """Check whether data fetched at ``last_fetched`` is older than ``ttl_ms``.

    An age exactly equal to the TTL still counts as fresh.
    """
    return now - last_fetched > timedelta(milliseconds=ttl_ms)


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    """A cached record and the moment it was last confirmed by the backend."""

    item: T
    last_fetched: datetime


@dataclass(frozen=True)
class CacheOptions(Generic[T]):
    """Construction-time configuration for a CacheStore.

    Attributes:
        all_items_cache_ms: TTL for the whole-collection fetch.
        single_item_cache_ms: TTL for each individually fetched record.
        get_uid: Extracts the stable identifier from a record.
    """

    all_items_cache_ms: int
    single_item_cache_ms: int
    get_uid: Callable[[T], Uid]

    def __post_init__(self) -> None:
        for name in ("all_items_cache_ms", "single_item_cache_ms"):
            value = getattr(self, name)
            if value < 0:
                raise ConfigurationError(
                    "Cache TTL must be non-negative",
                    context={"option": name, "value": value},
                )


# Results


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful store operation."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class NotFound:
    """The backend has no record for the requested identifier."""

    uid: Uid

    @property
    def value(self) -> None:
        return None

    @property
    def ok(self) -> bool:
        return False


@dataclass(frozen=True)
class BackendFailure:
    """The backend call failed, or its response could not be cached."""

    error: BaseException

    @property
    def value(self) -> None:
        return None

    @property
    def ok(self) -> bool:
        return False

    @property
    def detail(self) -> str:
        return str(self.error)


Result = Union[Ok[T], NotFound, BackendFailure]


# Change notification


class StoreEventKind(str, Enum):
    """Kinds of state change published by a CacheStore."""

    ENTRIES_REPLACED = "entries_replaced"
    ENTRY_UPSERTED = "entry_upserted"
    FETCHING_ALL_CHANGED = "fetching_all_changed"


class BindingEventKind(str, Enum):
    """Kinds of state change published by an ItemBinding."""

    LOADING_CHANGED = "loading_changed"
    SAVING_CHANGED = "saving_changed"
    VALUE_CHANGED = "value_changed"


@dataclass(frozen=True)
class StoreEvent:
    """A change to a store's entries or progress flags."""

    kind: StoreEventKind
    uid: Uid | None = None


@dataclass(frozen=True)
class BindingEvent:
    """A change to a binding's bound value or progress flags."""

    kind: BindingEventKind
    uid: Uid
    value: Any = None
