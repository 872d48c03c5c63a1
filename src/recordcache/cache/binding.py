"""
ItemBinding: per-record facade over a CacheStore.

A binding holds no cache state. It keeps the currently bound value for one
identifier plus two progress flags, and routes load/save through the store.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Generic, TypeVar

from recordcache.cache.events import Listeners
from recordcache.logging import get_logger
from recordcache.types import BindingEvent, BindingEventKind, Uid

if TYPE_CHECKING:
    from recordcache.cache.store import CacheStore

logger = get_logger(__name__)

T = TypeVar("T")


class ItemBinding(Generic[T]):
    """Live get/save handle for a single record.

    ``is_loading`` starts True: a binding counts as loading until its first
    load() completes. Both flags are reset when their operation finishes,
    whether it succeeded or not.
    """

    def __init__(self, store: CacheStore[T], uid: Uid) -> None:
        self.store = store
        self.uid = uid
        self._value: T | None = None
        self._loading = True
        self._saving = False
        self._listeners: Listeners[BindingEvent] = Listeners()

    def __repr__(self) -> str:
        return f"ItemBinding(uid={self.uid!r}, loading={self._loading}, saving={self._saving})"

    @property
    def value(self) -> T | None:
        """The bound record, or None if nothing is loaded."""
        return self._value

    @value.setter
    def value(self, value: T | None) -> None:
        self._value = value
        self._listeners.emit(BindingEvent(BindingEventKind.VALUE_CHANGED, self.uid, value))

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def is_saving(self) -> bool:
        return self._saving

    def subscribe(self, listener: Callable[[BindingEvent], None]) -> Callable[[], None]:
        """Register a change listener; returns a callable that unsubscribes it."""
        return self._listeners.subscribe(listener)

    def _set_loading(self, value: bool) -> None:
        if self._loading != value:
            self._loading = value
            self._listeners.emit(BindingEvent(BindingEventKind.LOADING_CHANGED, self.uid, value))

    def _set_saving(self, value: bool) -> None:
        if self._saving != value:
            self._saving = value
            self._listeners.emit(BindingEvent(BindingEventKind.SAVING_CHANGED, self.uid, value))

    async def load(self) -> T | None:
        """Fetch the record through the store and bind the result (possibly None)."""
        self._set_loading(True)
        try:
            self.value = await self.store.fetch_one(self.uid)
        finally:
            self._set_loading(False)
        return self._value

    async def save(self) -> T | None:
        """Write the bound value back through the store.

        The identifier is taken from the bound value, not from ``self.uid``.
        On success the bound value becomes the authoritative record; on
        failure it is left as edited.

        Returns:
            The stored record, or None if nothing was bound or the update failed.
        """
        current = self._value
        if current is None:
            return None

        self._set_saving(True)
        try:
            try:
                uid = self.store.get_uid(current)
            except Exception:
                logger.error("Bound value has no readable uid", exc_info=True, uid=self.uid)
                return None
            saved = await self.store.update(uid, current)
        finally:
            self._set_saving(False)

        if saved is None:
            logger.warning("Save did not complete; keeping local edits", uid=self.uid)
            return None

        self.value = saved
        return saved
