"""
CacheStore: TTL-gated cache in front of a record backend.

Holds the cached record set and the collection-level fetch timestamp.
Reads are served from the cache while they are fresh; writes go to the
backend and the authoritative response is reconciled back into the cache.

Backend failures never cross the store boundary. Every *_result operation
returns Ok, NotFound or BackendFailure; the plain operations unwrap that to
the record or None.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any, Callable, Generic, TypeVar

from recordcache.backends.base import Backend
from recordcache.cache.events import Listeners
from recordcache.exceptions import RecordNotFoundError
from recordcache.logging import get_logger, log_context
from recordcache.types import (
    BackendFailure,
    CacheEntry,
    CacheOptions,
    Clock,
    NotFound,
    Ok,
    Result,
    StoreEvent,
    StoreEventKind,
    Uid,
    has_expired,
    utc_now,
)

if TYPE_CHECKING:
    from datetime import datetime

    from recordcache.cache.binding import ItemBinding

logger = get_logger(__name__)

T = TypeVar("T")


class CacheStore(Generic[T]):
    """Cache of uniquely-identified records backed by a Backend.

    At most one entry exists per identifier. Point writes (fetch_one, update,
    create) upsert in place or append; a whole-collection fetch replaces the
    entry sequence wholesale, adopting the backend's ordering.

    All state transitions happen between awaits, so on a single event loop
    each upsert or replace is atomic. Concurrent identical calls are not
    deduplicated and the last one to resolve wins.
    """

    def __init__(
        self,
        backend: Backend[T],
        options: CacheOptions[T],
        *,
        clock: Clock = utc_now,
        name: str = "records",
    ) -> None:
        """Initialize the store with an empty cache.

        Args:
            backend: System of record to delegate reads and writes to.
            options: TTL windows and identifier extraction.
            clock: Source of timezone-aware timestamps.
            name: Label used in log context.
        """
        self.backend = backend
        self.options = options
        self.name = name
        self._clock = clock
        self._entries: list[CacheEntry[T]] = []
        self._collection_last_fetched: datetime | None = None
        self._fetching_all = False
        self._listeners: Listeners[StoreEvent] = Listeners()

    # Read-only views

    @property
    def entries(self) -> tuple[CacheEntry[T], ...]:
        """Snapshot of all cache entries in store order."""
        return tuple(self._entries)

    @property
    def items(self) -> list[T]:
        """Copies of all cached records in store order."""
        return [copy.copy(entry.item) for entry in self._entries]

    @property
    def is_fetching_all(self) -> bool:
        """True while a whole-collection fetch is in progress."""
        return self._fetching_all

    @property
    def collection_last_fetched(self) -> datetime | None:
        """When the whole collection was last fetched successfully."""
        return self._collection_last_fetched

    def get_uid(self, item: T) -> Uid:
        return self.options.get_uid(item)

    def get_entry(self, uid: Uid) -> CacheEntry[T] | None:
        """Return the cache entry for ``uid`` without consulting the backend."""
        index = self._index_of(uid)
        return self._entries[index] if index != -1 else None

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, uid: object) -> bool:
        return any(self.get_uid(entry.item) == uid for entry in self._entries)

    def subscribe(self, listener: Callable[[StoreEvent], None]) -> Callable[[], None]:
        """Register a change listener; returns a callable that unsubscribes it."""
        return self._listeners.subscribe(listener)

    def bind(self, uid: Uid) -> ItemBinding[T]:
        """Create a binding that loads and saves the record ``uid``."""
        from recordcache.cache.binding import ItemBinding

        return ItemBinding(self, uid)

    # Internals

    def _index_of(self, uid: Uid) -> int:
        for index, entry in enumerate(self._entries):
            if self.get_uid(entry.item) == uid:
                return index
        return -1

    def _set_fetching_all(self, value: bool) -> None:
        if self._fetching_all != value:
            self._fetching_all = value
            self._listeners.emit(StoreEvent(StoreEventKind.FETCHING_ALL_CHANGED))

    def _upsert(self, record: T) -> None:
        """Replace the entry sharing the record's uid in place, or append one."""
        uid = self.get_uid(record)
        entry = CacheEntry(item=copy.copy(record), last_fetched=self._clock())
        index = self._index_of(uid)
        if index == -1:
            self._entries.append(entry)
        else:
            self._entries[index] = entry
        self._listeners.emit(StoreEvent(StoreEventKind.ENTRY_UPSERTED, uid))

    def _replace_all(self, records: list[T]) -> None:
        now = self._clock()
        entries: list[CacheEntry[T]] = []
        positions: dict[Uid, int] = {}
        for record in records:
            entry = CacheEntry(item=copy.copy(record), last_fetched=now)
            uid = self.get_uid(record)
            if uid in positions:
                logger.warning("Backend returned duplicate record; keeping the last", uid=uid)
                entries[positions[uid]] = entry
            else:
                positions[uid] = len(entries)
                entries.append(entry)
        self._entries = entries
        self._collection_last_fetched = now
        self._listeners.emit(StoreEvent(StoreEventKind.ENTRIES_REPLACED))

    # Operations returning typed results

    async def fetch_all_result(self) -> Result[list[T]]:
        """Fetch every record, serving from cache while the collection is fresh."""
        with log_context(store=self.name, operation="fetch_all"):
            self._set_fetching_all(True)
            try:
                last_fetched = self._collection_last_fetched
                if last_fetched is not None and not has_expired(
                    last_fetched, self.options.all_items_cache_ms, self._clock()
                ):
                    logger.debug("Collection cache hit", count=len(self._entries))
                    return Ok(self.items)

                logger.debug("Collection cache miss")
                try:
                    records = await self.backend.fetch_all()
                    self._replace_all(list(records))
                except Exception as e:
                    logger.error("Failed to fetch all records", exc_info=True, error=str(e))
                    return BackendFailure(e)

                logger.info("Collection fetched", count=len(self._entries))
                return Ok(self.items)
            finally:
                self._set_fetching_all(False)

    async def fetch_one_result(self, uid: Uid) -> Result[T]:
        """Fetch one record, serving from cache while its entry is fresh."""
        with log_context(store=self.name, operation="fetch_one"):
            existing = self.get_entry(uid)
            if existing is not None and not has_expired(
                existing.last_fetched, self.options.single_item_cache_ms, self._clock()
            ):
                logger.debug("Record cache hit", uid=uid)
                return Ok(copy.copy(existing.item))

            logger.debug("Record cache miss", uid=uid)
            try:
                record = await self.backend.fetch_one(uid)
                if record is not None:
                    self._upsert(record)
            except RecordNotFoundError:
                record = None
            except Exception as e:
                logger.error("Failed to fetch record", exc_info=True, uid=uid, error=str(e))
                return BackendFailure(e)

            if record is None:
                logger.warning("Record not found", uid=uid)
                return NotFound(uid)

            return Ok(record)

    async def update_result(self, uid: Uid, patch: Any) -> Result[T]:
        """Update a record in the backend and reconcile the response into the cache.

        The cache entry is matched on the uid of the returned record, which
        may differ from ``uid``.
        """
        with log_context(store=self.name, operation="update"):
            try:
                updated = await self.backend.update(uid, patch)
                returned_uid = self.get_uid(updated)
                self._upsert(updated)
            except RecordNotFoundError:
                logger.warning("Cannot update missing record", uid=uid)
                return NotFound(uid)
            except Exception as e:
                logger.error("Failed to update record", exc_info=True, uid=uid, error=str(e))
                return BackendFailure(e)

            if returned_uid != uid:
                logger.warning(
                    "Backend returned a record with a different uid",
                    requested_uid=uid,
                    returned_uid=returned_uid,
                )

            logger.info("Record updated", uid=returned_uid)
            return Ok(updated)

    async def create_result(self, record: T) -> Result[T]:
        """Create a record in the backend and add its stored form to the cache."""
        with log_context(store=self.name, operation="create"):
            try:
                created = await self.backend.create(record)
                created_uid = self.get_uid(created)
                self._upsert(created)
            except Exception as e:
                logger.error("Failed to create record", exc_info=True, error=str(e))
                return BackendFailure(e)

            logger.info("Record created", uid=created_uid)
            return Ok(created)

    # Plain operations: record or None

    async def fetch_all(self) -> list[T] | None:
        return (await self.fetch_all_result()).value

    async def fetch_one(self, uid: Uid) -> T | None:
        return (await self.fetch_one_result(uid)).value

    async def update(self, uid: Uid, patch: Any) -> T | None:
        return (await self.update_result(uid, patch)).value

    async def create(self, record: T) -> T | None:
        return (await self.create_result(record)).value
