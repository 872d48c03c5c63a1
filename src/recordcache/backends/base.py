"""
Base classes for record backends.

A backend is the system of record the cache is a time-bounded view over.
The cache only ever talks to it through four coroutines:

- fetch_all: return every record (raises on failure)
- fetch_one: return one record, or None when it does not exist
- update: apply a patch and return the authoritative record
- create: store a new record and return its authoritative form
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Generic, TypeVar

from recordcache.types import Uid

T = TypeVar("T")


class Backend(ABC, Generic[T]):
    """Abstract interface for record backends."""

    @abstractmethod
    async def fetch_all(self) -> list[T]:
        """Fetch every record."""
        ...

    @abstractmethod
    async def fetch_one(self, uid: Uid) -> T | None:
        """Fetch a single record, or None if it does not exist."""
        ...

    @abstractmethod
    async def update(self, uid: Uid, patch: Any) -> T:
        """Update a record and return the stored result."""
        ...

    @abstractmethod
    async def create(self, record: T) -> T:
        """Create a record and return the stored result."""
        ...

    async def close(self) -> None:
        """Close any open connections."""
        return None


class CallableBackend(Backend[T]):
    """Backend assembled from four plain async callables.

    Useful when the transport is already wrapped in functions, e.g.::

        CallableBackend(
            fetch_all=api.orgs.get,
            fetch_one=lambda uid: api.org(uid).get(),
            update=lambda uid, org: api.org(uid).update(org),
            create=api.orgs.create,
        )
    """

    def __init__(
        self,
        fetch_all: Callable[[], Awaitable[list[T]]],
        fetch_one: Callable[[Uid], Awaitable[T | None]],
        update: Callable[[Uid, Any], Awaitable[T]],
        create: Callable[[T], Awaitable[T]],
    ) -> None:
        self._fetch_all = fetch_all
        self._fetch_one = fetch_one
        self._update = update
        self._create = create

    async def fetch_all(self) -> list[T]:
        return list(await self._fetch_all())

    async def fetch_one(self, uid: Uid) -> T | None:
        return await self._fetch_one(uid)

    async def update(self, uid: Uid, patch: Any) -> T:
        return await self._update(uid, patch)

    async def create(self, record: T) -> T:
        return await self._create(record)
