from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta
from typing import Protocol

from credkeeper.services._shared.dto import SAFETY_MARGIN_SECONDS, Token, TokenKind


class TokenStore(Protocol):
    """
    Storage strategy for the current token of each kind.

    Implementations decide what "fresh enough" means; the token manager only
    asks and never inspects expiries itself.
    """

    def needs_refresh(self, kind: TokenKind) -> bool:
        """Return ``True`` when the stored token must be replaced before use."""

    def current(self, kind: TokenKind) -> str | None:
        """Return the best available value (possibly stale), ``None`` if never set."""

    def persist(self, kind: TokenKind, value: str, expires_in: int) -> None:
        """Store a freshly fetched token whose lifetime is ``expires_in`` seconds."""


class InMemoryTokenStore(TokenStore):
    """
    Process-local token store with wall-clock expiry.

    The safety margin is applied when persisting: a token living
    ``expires_in`` seconds is considered stale ``margin`` seconds early.

    .. note::
       Each kind holds one immutable :class:`Token`; persisting replaces it
       in a single assignment so readers never see a half-written token.
    """

    def __init__(self, *, margin_seconds: int = SAFETY_MARGIN_SECONDS) -> None:
        self.margin_seconds = margin_seconds
        self._tokens: dict[TokenKind, Token] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _now() -> datetime:
        return datetime.now(UTC)

    def token(self, kind: TokenKind) -> Token | None:
        """Return the stored :class:`Token` snapshot (for diagnostics)."""
        return self._tokens.get(kind)

    def needs_refresh(self, kind: TokenKind) -> bool:
        token = self._tokens.get(kind)
        if token is None:
            return True
        return self._now() > token.expires_at

    def current(self, kind: TokenKind) -> str | None:
        token = self._tokens.get(kind)
        return token.value if token else None

    def persist(self, kind: TokenKind, value: str, expires_in: int) -> None:
        # expires_in <= margin lands in the past and forces the next refresh
        expires_at = self._now() + timedelta(seconds=int(expires_in) - self.margin_seconds)
        with self._lock:
            self._tokens[kind] = Token(value=value, expires_at=expires_at)
