"""Redis adapters: shared token store and distributed refresh gate."""

from __future__ import annotations

from .redis_refresh_gate import RedisRefreshGate
from .redis_token_store import RedisTokenStore

__all__ = ["RedisTokenStore", "RedisRefreshGate"]
