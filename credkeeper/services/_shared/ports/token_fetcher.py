from __future__ import annotations

import threading
from collections import deque
from typing import Protocol

from credkeeper.services._shared.dto import (
    Credential,
    FetchFailure,
    FetchOutcome,
    FetchResult,
    TokenKind,
)


class TokenFetcher(Protocol):
    """Port for obtaining a fresh token from the remote authority."""

    def fetch(
        self,
        credential: Credential,
        kind: TokenKind,
        *,
        access_token: str | None = None,
    ) -> FetchOutcome:
        """
        Perform one synchronous remote call.

        :param credential: Principal to authenticate as.
        :param kind: Which token to obtain.
        :param access_token: Valid access token, required for ``JS_TOKEN``.
        :returns: :class:`FetchResult` on success, :class:`FetchFailure` otherwise.
        """


class StubTokenFetcher(TokenFetcher):
    """
    Deterministic test double for the remote authority.

    Without a script every call succeeds with ``"<prefix>-<n>"`` and the
    configured lifetime. Scripted outcomes (results, failures or exceptions)
    are consumed first, per kind, in order.

    .. note::
       ``gate`` lets a test hold every fetch open until it sets the event,
       which makes concurrent refreshes observable.
    """

    def __init__(self, *, expires_in: int = 7200, gate: threading.Event | None = None) -> None:
        self.expires_in = expires_in
        self.gate = gate
        self.calls: list[tuple[TokenKind, str | None]] = []
        self._script: dict[TokenKind, deque[FetchOutcome | Exception]] = {
            kind: deque() for kind in TokenKind
        }
        self._seq = 0
        self._in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    # -------------------------- scripting ----------------------------

    def script(self, kind: TokenKind, *outcomes: FetchOutcome | Exception) -> StubTokenFetcher:
        """Queue outcomes returned (or raised) by the next calls for ``kind``."""
        self._script[kind].extend(outcomes)
        return self

    def calls_for(self, kind: TokenKind) -> int:
        return sum(1 for k, _ in self.calls if k is kind)

    # ----------------------------- API -------------------------------

    def fetch(
        self,
        credential: Credential,
        kind: TokenKind,
        *,
        access_token: str | None = None,
    ) -> FetchOutcome:
        with self._lock:
            self.calls.append((kind, access_token))
            self._in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self._in_flight)
            scripted = self._script[kind].popleft() if self._script[kind] else None
            self._seq += 1
            seq = self._seq
        try:
            if self.gate is not None:
                self.gate.wait(timeout=5)
            if isinstance(scripted, Exception):
                raise scripted
            if scripted is not None:
                return scripted
            if kind is TokenKind.JS_TOKEN and not access_token:
                return FetchFailure(code=40001, message="invalid credential, access_token is missing")
            return FetchResult(value=f"{kind.key_prefix}-{seq}", expires_in=self.expires_in)
        finally:
            with self._lock:
                self._in_flight -= 1
