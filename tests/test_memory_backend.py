"""
Tests for the in-memory backend and the callable adapter.
"""

from __future__ import annotations

from typing import Any

import pytest

from recordcache.backends.base import CallableBackend
from recordcache.backends.memory import InMemoryBackend, demo_orgs
from recordcache.exceptions import BackendError, RecordNotFoundError


class TestInMemoryBackend:
    """Test the fake API."""

    @pytest.mark.asyncio
    async def test_fetch_all_returns_copies(self, backend: InMemoryBackend) -> None:
        orgs = await backend.fetch_all()

        assert [o["name"] for o in orgs] == ["Org 1", "Org 2", "Org 3", "Org 4"]
        orgs[0]["name"] = "mutated"
        assert backend.records[0]["name"] == "Org 1"

    @pytest.mark.asyncio
    async def test_fetch_one(self, backend: InMemoryBackend) -> None:
        assert await backend.fetch_one(2) == {"name": "Org 2", "id": 2}
        assert await backend.fetch_one(99) is None

    @pytest.mark.asyncio
    async def test_update_merges_patch(self, backend: InMemoryBackend) -> None:
        updated = await backend.update(1, {"name": "Org 1 renamed"})

        assert updated == {"name": "Org 1 renamed", "id": 1}
        assert backend.records[0] == {"name": "Org 1 renamed", "id": 1}

    @pytest.mark.asyncio
    async def test_update_unknown_raises(self, backend: InMemoryBackend) -> None:
        with pytest.raises(RecordNotFoundError):
            await backend.update(99, {"name": "nope"})

    @pytest.mark.asyncio
    async def test_create_appends(self, backend: InMemoryBackend) -> None:
        created = await backend.create({"name": "Org 5", "id": 5})

        assert created == {"name": "Org 5", "id": 5}
        assert len(backend.records) == 5

    @pytest.mark.asyncio
    async def test_call_counts(self, backend: InMemoryBackend) -> None:
        await backend.fetch_all()
        await backend.fetch_one(1)
        await backend.fetch_one(2)

        assert backend.calls["fetch_all"] == 1
        assert backend.calls["fetch_one"] == 2
        assert backend.calls["update"] == 0

    @pytest.mark.asyncio
    async def test_fail_next(self, backend: InMemoryBackend) -> None:
        backend.fail_next("fetch_all")

        with pytest.raises(BackendError):
            await backend.fetch_all()
        # Only the next call fails
        assert len(await backend.fetch_all()) == 4

    @pytest.mark.asyncio
    async def test_custom_uid_field(self) -> None:
        backend = InMemoryBackend([{"slug": "a", "v": 1}], uid_field="slug")
        assert await backend.fetch_one("a") == {"slug": "a", "v": 1}

    @pytest.mark.asyncio
    async def test_latency(self) -> None:
        backend = InMemoryBackend(demo_orgs(), latency_ms=1)
        assert len(await backend.fetch_all()) == 4

    def test_seed_is_not_shared(self) -> None:
        seed = demo_orgs()
        backend = InMemoryBackend(seed)
        seed[0]["name"] = "changed"
        assert backend.records[0]["name"] == "Org 1"


class TestCallableBackend:
    """Test the adapter over plain async callables."""

    @pytest.mark.asyncio
    async def test_delegates_to_callables(self) -> None:
        calls: list[tuple[str, Any]] = []

        async def fetch_all() -> list[dict[str, Any]]:
            calls.append(("fetch_all", None))
            return [{"id": 1}]

        async def fetch_one(uid: Any) -> dict[str, Any] | None:
            calls.append(("fetch_one", uid))
            return {"id": uid}

        async def update(uid: Any, patch: Any) -> dict[str, Any]:
            calls.append(("update", uid))
            return {"id": uid, **patch}

        async def create(record: dict[str, Any]) -> dict[str, Any]:
            calls.append(("create", record["id"]))
            return record

        backend = CallableBackend(fetch_all, fetch_one, update, create)

        assert await backend.fetch_all() == [{"id": 1}]
        assert await backend.fetch_one(3) == {"id": 3}
        assert await backend.update(3, {"x": 1}) == {"id": 3, "x": 1}
        assert await backend.create({"id": 9}) == {"id": 9}
        await backend.close()

        assert calls == [
            ("fetch_all", None),
            ("fetch_one", 3),
            ("update", 3),
            ("create", 9),
        ]
