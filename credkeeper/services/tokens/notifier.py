"""Listener registry notified whenever a token value is replaced."""

from __future__ import annotations

import threading
from collections.abc import Callable

from credkeeper.services._shared.dto import ConfigChangeNotice

Listener = Callable[[ConfigChangeNotice], None]


class ChangeNotifier:
    """
    Insertion-ordered, duplicate-free listener list with synchronous dispatch.

    ``publish`` calls every listener on the publisher's thread, in the order
    they subscribed. Exceptions raised by a listener are **not** caught: they
    propagate to whoever published, and later listeners are skipped for that
    notice. Listeners that must not disturb the caller should guard
    themselves.
    """

    def __init__(self) -> None:
        # Plain list: listeners only need equality, not hashing
        self._listeners: list[Listener] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._listeners)

    def __contains__(self, listener: object) -> bool:
        return listener in self._listeners

    def subscribe(self, listener: Listener) -> None:
        """Register ``listener``; subscribing it again keeps its original position."""
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        """Remove ``listener``; unknown listeners are ignored."""
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

    def unsubscribe_all(self) -> None:
        with self._lock:
            self._listeners.clear()

    def publish(self, notice: ConfigChangeNotice) -> None:
        """Deliver ``notice`` to the listeners subscribed at call time."""
        with self._lock:
            snapshot = list(self._listeners)
        for listener in snapshot:
            listener(notice)


__all__ = ["ChangeNotifier", "Listener"]
