"""
credkeeper.services._shared.ports
=================================

Collection of *ports* (hexagonal interfaces) that define the contracts
for the token lifecycle infrastructure.

These ports decouple the token manager from concrete implementations of
token storage, refresh coordination, and remote fetching.

Modules
-------
- :mod:`token_store`:
    Defines :class:`~.TokenStore` (where the current token of each kind lives
    and when it is stale) plus the process-local :class:`~.InMemoryTokenStore`.

- :mod:`refresh_gate`:
    Defines :class:`~.RefreshGate`, the non-blocking single-flight gate, plus
    the in-process :class:`~.LocalRefreshGate`.

- :mod:`token_fetcher`:
    Defines :class:`~.TokenFetcher` for the remote call plus the deterministic
    :class:`~.StubTokenFetcher`.

Design Notes
------------
Shared implementations (Redis cache and lock, HTTP fetcher) live under
``credkeeper.infra``.
"""

from __future__ import annotations

from .refresh_gate import LocalRefreshGate, RefreshGate
from .token_fetcher import StubTokenFetcher, TokenFetcher
from .token_store import InMemoryTokenStore, TokenStore

__all__ = [
    "TokenStore",
    "RefreshGate",
    "TokenFetcher",
    "InMemoryTokenStore",
    "LocalRefreshGate",
    "StubTokenFetcher",
]
