"""
In-memory backend.

Simulates a remote API over a list of dict records so the cache can be
exercised without a server. Every call sleeps for the configured latency and
hands out copies, never references into its own storage.
"""

from __future__ import annotations

import asyncio
import copy
from collections import Counter
from typing import Any, Iterable

from recordcache.backends.base import Backend
from recordcache.exceptions import BackendError, RecordNotFoundError
from recordcache.logging import get_logger
from recordcache.types import Uid

logger = get_logger(__name__)

Record = dict[str, Any]


class InMemoryBackend(Backend[Record]):
    """Fake backend holding dict records keyed by ``uid_field``.

    Attributes:
        calls: Number of calls made per operation name.
    """

    def __init__(
        self,
        records: Iterable[Record] = (),
        uid_field: str = "id",
        latency_ms: int = 0,
    ) -> None:
        """Initialize the backend.

        Args:
            records: Initial records. Copied on construction.
            uid_field: Key holding each record's identifier.
            latency_ms: Simulated round-trip latency per call.
        """
        self.uid_field = uid_field
        self.latency_ms = latency_ms
        self.records: list[Record] = [copy.deepcopy(r) for r in records]
        self.calls: Counter[str] = Counter()
        self._failures: dict[str, BaseException] = {}

    def fail_next(self, operation: str, error: BaseException | None = None) -> None:
        """Make the next call to ``operation`` raise ``error``."""
        self._failures[operation] = error or BackendError(
            "Simulated backend failure", context={"operation": operation}
        )

    async def _call(self, operation: str) -> None:
        self.calls[operation] += 1
        if self.latency_ms:
            await asyncio.sleep(self.latency_ms / 1000)
        error = self._failures.pop(operation, None)
        if error is not None:
            raise error

    def _index_of(self, uid: Uid) -> int:
        for index, record in enumerate(self.records):
            if record.get(self.uid_field) == uid:
                return index
        return -1

    async def fetch_all(self) -> list[Record]:
        await self._call("fetch_all")
        return [copy.deepcopy(r) for r in self.records]

    async def fetch_one(self, uid: Uid) -> Record | None:
        await self._call("fetch_one")
        index = self._index_of(uid)
        if index == -1:
            return None
        return copy.deepcopy(self.records[index])

    async def update(self, uid: Uid, patch: Any) -> Record:
        await self._call("update")
        index = self._index_of(uid)
        if index == -1:
            raise RecordNotFoundError("Record not found", context={"uid": uid})

        merged = {**self.records[index], **copy.deepcopy(patch)}
        self.records[index] = merged
        logger.debug("Record updated", uid=uid)
        return copy.deepcopy(merged)

    async def create(self, record: Record) -> Record:
        await self._call("create")
        stored = copy.deepcopy(record)
        self.records.append(stored)
        logger.debug("Record created", uid=stored.get(self.uid_field))
        return copy.deepcopy(stored)


def demo_orgs() -> list[Record]:
    """Seed data for the demo organisation store."""
    return [{"name": f"Org {i}", "id": i} for i in range(1, 5)]
