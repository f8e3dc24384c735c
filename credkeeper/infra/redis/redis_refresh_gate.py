from __future__ import annotations

import logging

import redis  # type: ignore[import-untyped]
from redis.exceptions import LockError, RedisError  # type: ignore[import-untyped]

from credkeeper.services._shared.dto import TokenKind
from credkeeper.services._shared.ports import RefreshGate

log = logging.getLogger(__name__)


class RedisRefreshGate(RefreshGate):
    """
    Fleet-wide single-flight gate built on a Redis lock.

    The lock key is ``<kindLockPrefix>_<appid>`` and expires after
    ``timeout`` seconds so a crashed holder cannot block refreshes forever.
    The lock token is thread-local, so threads of one process contend like
    separate processes do.

    :param r: A Redis client (already connected).
    :param name: Lock key.
    :param timeout: Auto-expiry of the lock in seconds.
    """

    def __init__(self, r: redis.Redis, name: str, *, timeout: float = 30) -> None:
        self.r = r
        self.name = name
        self.timeout = timeout
        self._lock = r.lock(name, timeout=timeout)

    @classmethod
    def for_kind(
        cls, r: redis.Redis, *, app_id: str, kind: TokenKind, timeout: float = 30
    ) -> RedisRefreshGate:
        """Build the gate guarding ``kind`` for ``app_id``."""
        return cls(r, kind.lock_key_for(app_id), timeout=timeout)

    def try_acquire(self) -> bool:
        try:
            return bool(self._lock.acquire(blocking=False))
        except RedisError:
            # Unreachable Redis counts as "someone else holds it"
            log.warning("redis.refresh_gate.acquire_failed", exc_info=True, extra={"lock": self.name})
            return False

    def release(self) -> None:
        try:
            self._lock.release()
        except LockError:
            # Not held by us (never acquired, or expired meanwhile)
            return
        except RedisError:
            log.warning("redis.refresh_gate.release_failed", exc_info=True, extra={"lock": self.name})
