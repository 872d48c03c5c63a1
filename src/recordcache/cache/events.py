"""Listener registry for change notifications."""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from recordcache.logging import get_logger

logger = get_logger(__name__)

E = TypeVar("E")

Listener = Callable[[E], None]


class Listeners(Generic[E]):
    """Ordered set of callbacks notified synchronously on each change.

    A listener that raises is logged and skipped; it never breaks the
    operation that triggered the change or the remaining listeners.
    """

    def __init__(self) -> None:
        self._listeners: list[Callable[[E], None]] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Callable[[E], None]) -> Callable[[], None]:
        """Register a listener.

        Returns:
            A callable that removes the listener. Safe to call more than once.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event: E) -> None:
        # Snapshot so listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Change listener failed", event=repr(event))
