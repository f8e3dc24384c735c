"""Global extension instances and initialization helpers."""

from __future__ import annotations

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app, has_app_context
from redis.exceptions import RedisError  # type: ignore[import-untyped]

from credkeeper.services.tokens import TokenManager, build_token_manager

# Global singletons (import-safe)
redis_client: redis.Redis | None = None
token_manager: TokenManager | None = None


def init_app(app: Flask) -> None:
    """Initialize the Redis client and the token manager.

    Parameters
    ----------
    app: flask.Flask
        Application whose configuration drives the wiring. The manager is
        stored in ``app.extensions["token_manager"]`` and warmed up when
        ``TOKEN_EAGER_INIT`` is set.

    Notes
    -----
    A ``token_fetcher`` already present in ``app.extensions`` (set before the
    factory runs, e.g. by tests) replaces the HTTP fetcher.
    """
    global redis_client, token_manager

    redis_url = app.config.get("REDIS_URL")
    if redis_url:
        redis_client = redis.Redis.from_url(redis_url)
        try:
            redis_client.ping()
        except RedisError as exc:
            raise RuntimeError(f"Failed to connect to Redis at {redis_url!r}") from exc
        app.extensions["redis_client"] = redis_client
    else:
        redis_client = None
        app.extensions.pop("redis_client", None)

    token_manager = build_token_manager(
        app.config,
        redis_client=redis_client,
        fetcher=app.extensions.get("token_fetcher"),
    )
    app.extensions["token_manager"] = token_manager

    if app.config.get("TOKEN_EAGER_INIT"):
        token_manager.init()


def get_redis() -> redis.Redis:
    """Return the initialized Redis client."""
    if redis_client is None:
        raise RuntimeError("Redis client is not initialized. Set REDIS_URL and call init_app().")
    return redis_client


def get_token_manager() -> TokenManager:
    """Return the token manager of the current app (or the last one initialized)."""
    if has_app_context() and "token_manager" in current_app.extensions:
        return current_app.extensions["token_manager"]
    if token_manager is None:
        raise RuntimeError("Token manager is not initialized. Call init_app() first.")
    return token_manager
