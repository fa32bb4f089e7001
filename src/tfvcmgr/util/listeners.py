"""Per-instance listener registry."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Generic, TypeVar

E = TypeVar("E")

logger = logging.getLogger(__name__)


class ListenerList(Generic[E]):
    """
    Thread-safe list of callables notified with an event.

    Notes:
        - Listeners are called synchronously on the firing thread, in
          registration order.
        - fire() iterates over a snapshot, so listeners may add or remove
          listeners while being notified.
        - A listener exception propagates to the caller of fire(); later
          listeners are not called.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: list[Callable[[E], None]] = []

    def add(self, listener: Callable[[E], None]) -> bool:
        """Register listener. Returns False if it was already registered."""
        if listener is None:
            raise ValueError("listener must not be None")
        with self._lock:
            if listener in self._listeners:
                return False
            self._listeners.append(listener)
            return True

    def remove(self, listener: Callable[[E], None]) -> bool:
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                return False
            return True

    def clear(self) -> None:
        with self._lock:
            self._listeners = []

    def fire(self, event: E) -> None:
        with self._lock:
            snapshot = list(self._listeners)

        for listener in snapshot:
            try:
                listener(event)
            except Exception:
                logger.exception("Listener %r failed for %s", listener, type(event).__name__)
                raise

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners)
