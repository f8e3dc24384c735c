"""Token lifecycle service and its wiring from configuration."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import redis  # type: ignore[import-untyped]

from credkeeper.core.config import STORE_LOCAL, STORE_REDIS
from credkeeper.services._shared.dto import SAFETY_MARGIN_SECONDS, Credential, TokenKind
from credkeeper.services._shared.errors import ConfigurationError
from credkeeper.services._shared.ports import (
    InMemoryTokenStore,
    LocalRefreshGate,
    RefreshGate,
    TokenFetcher,
    TokenStore,
)
from credkeeper.services.tokens.notifier import ChangeNotifier
from credkeeper.services.tokens.service import TokenManager


def build_token_manager(
    cfg: Mapping[str, Any],
    *,
    redis_client: redis.Redis | None = None,
    fetcher: TokenFetcher | None = None,
) -> TokenManager:
    """
    Wire a :class:`TokenManager` from a configuration mapping.

    :param cfg: Mapping exposing the ``TOKEN_*`` keys (e.g. ``app.config``).
    :param redis_client: Connected client; required when ``TOKEN_STORE`` is ``redis``.
    :param fetcher: Remote adapter; defaults to the HTTP fetcher pointed at
        ``TOKEN_API_BASE_URL``.
    :raises ConfigurationError: On a missing credential, an unknown store
        backend, or a Redis store without a client.
    """
    app_id = str(cfg.get("TOKEN_APP_ID") or "").strip()
    secret = str(cfg.get("TOKEN_APP_SECRET") or "").strip()
    if not app_id or not secret:
        raise ConfigurationError("TOKEN_APP_ID and TOKEN_APP_SECRET must be set")
    credential = Credential(app_id=app_id, secret=secret)

    margin = int(cfg.get("TOKEN_SAFETY_MARGIN", SAFETY_MARGIN_SECONDS))
    backend = str(cfg.get("TOKEN_STORE", STORE_LOCAL)).strip().lower()

    store: TokenStore
    gates: dict[TokenKind, RefreshGate]
    if backend == STORE_LOCAL:
        store = InMemoryTokenStore(margin_seconds=margin)
        gates = {kind: LocalRefreshGate() for kind in TokenKind}
    elif backend == STORE_REDIS:
        if redis_client is None:
            raise ConfigurationError("TOKEN_STORE=redis requires REDIS_URL")
        # infra adapters are imported on demand
        from credkeeper.infra.redis import RedisRefreshGate, RedisTokenStore

        timeout = float(cfg.get("TOKEN_LOCK_TIMEOUT", 30))
        store = RedisTokenStore(redis_client, app_id=app_id, margin_seconds=margin)
        gates = {
            kind: RedisRefreshGate.for_kind(redis_client, app_id=app_id, kind=kind, timeout=timeout)
            for kind in TokenKind
        }
    else:
        raise ConfigurationError(f"Unknown TOKEN_STORE {backend!r}")

    if fetcher is None:
        from credkeeper.infra.http import WeChatTokenFetcher

        fetcher = WeChatTokenFetcher(
            str(cfg.get("TOKEN_API_BASE_URL", "https://api.weixin.qq.com")),
            timeout=float(cfg.get("TOKEN_HTTP_TIMEOUT", 10)),
        )

    return TokenManager(
        credential,
        fetcher=fetcher,
        store=store,
        gates=gates,
        enable_ticket=bool(cfg.get("TOKEN_ENABLE_TICKET", False)),
    )


__all__ = ["TokenManager", "ChangeNotifier", "build_token_manager"]
