# comments in English; reST docstrings
from __future__ import annotations

import logging
import threading

import redis  # type: ignore[import-untyped]
from redis.exceptions import RedisError  # type: ignore[import-untyped]

from credkeeper.services._shared.dto import SAFETY_MARGIN_SECONDS, TokenKind
from credkeeper.services._shared.ports import TokenStore

log = logging.getLogger(__name__)


class RedisTokenStore(TokenStore):
    """
    Redis-backed token store shared by every process of a deployment.

    Keys follow ``<kindPrefix>_<appid>`` (e.g. ``accessToken_wx123``) and carry
    the authority's lifetime verbatim as their TTL. The safety margin is only
    applied when reading: a key whose remaining TTL dropped below the margin
    is stale, otherwise its value is reused without a remote fetch.

    Redis failures never escape: a failed read counts as "absent" (so the
    caller attempts a refresh), a failed write is logged and the new value is
    still served from the process snapshot.

    :param r: A Redis client (already connected).
    :param app_id: Principal the keys belong to.
    :param margin_seconds: Minimum remaining TTL for a cached value to be fresh.
    """

    def __init__(
        self,
        r: redis.Redis,
        *,
        app_id: str,
        margin_seconds: int = SAFETY_MARGIN_SECONDS,
    ) -> None:
        self.r = r
        self.app_id = app_id
        self.margin_seconds = margin_seconds
        self._snapshot: dict[TokenKind, str] = {}
        self._lock = threading.Lock()

    # -------------------- helpers --------------------

    def _k(self, kind: TokenKind) -> str:
        return kind.key_for(self.app_id)

    @staticmethod
    def _decode(value: bytes | str | None) -> str | None:
        if value is None:
            return None
        if isinstance(value, bytes | bytearray):
            return value.decode()
        return str(value)

    def _remember(self, kind: TokenKind, value: str) -> None:
        with self._lock:
            self._snapshot[kind] = value

    def _read(self, kind: TokenKind) -> str | None:
        try:
            return self._decode(self.r.get(self._k(kind)))
        except RedisError:
            log.warning("redis.token_store.read_failed", exc_info=True, extra={"kind": kind.name})
            return None

    def remaining_ttl(self, kind: TokenKind) -> int | None:
        """
        Return the remaining lifetime of the key in seconds.

        ``None`` when the key is missing, has no expiry, or Redis is unreachable.
        """
        try:
            ttl = self.r.ttl(self._k(kind))
        except RedisError:
            log.warning("redis.token_store.ttl_failed", exc_info=True, extra={"kind": kind.name})
            return None
        if ttl is None or int(ttl) < 0:
            return None
        return int(ttl)

    # -------------------- API ------------------------

    def needs_refresh(self, kind: TokenKind) -> bool:
        value = self._read(kind)
        if not value:
            return True
        # Present: even a near-expiry value beats nothing while a refresh runs
        self._remember(kind, value)
        ttl = self.remaining_ttl(kind)
        return ttl is None or ttl < self.margin_seconds

    def current(self, kind: TokenKind) -> str | None:
        value = self._snapshot.get(kind)
        if value:
            return value
        value = self._read(kind)
        if value:
            self._remember(kind, value)
        return value

    def persist(self, kind: TokenKind, value: str, expires_in: int) -> None:
        self._remember(kind, value)
        try:
            self.r.set(self._k(kind), value, ex=max(1, int(expires_in)))
        except RedisError:
            log.error(
                "redis.token_store.write_failed",
                exc_info=True,
                extra={"app_id": self.app_id, "kind": kind.name},
            )
