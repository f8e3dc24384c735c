from __future__ import annotations

import threading
from typing import Protocol


class RefreshGate(Protocol):
    """
    Single-flight gate guarding the refresh of one token kind.

    ``try_acquire`` never blocks: a ``False`` answer means another refresh is
    already running and the caller should use the value it has.
    """

    def try_acquire(self) -> bool: ...

    def release(self) -> None: ...


class LocalRefreshGate(RefreshGate):
    """
    In-process gate backed by a non-blocking :class:`threading.Lock`.

    Only coordinates threads of the current process; use the Redis gate when
    several processes share one token.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    @property
    def held(self) -> bool:
        return self._lock.locked()

    def try_acquire(self) -> bool:
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        # Safe when not held; only the acquirer is expected to call it
        if self._lock.locked():
            self._lock.release()
