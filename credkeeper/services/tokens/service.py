# credkeeper/services/tokens/service.py
from __future__ import annotations

import logging
from collections.abc import Mapping

from credkeeper.core.logger import mask_token
from credkeeper.services._shared.dto import (
    ConfigChangeNotice,
    Credential,
    FetchFailure,
    FetchOutcome,
    TokenKind,
)
from credkeeper.services._shared.errors import TokenFetchError
from credkeeper.services._shared.ports.refresh_gate import LocalRefreshGate, RefreshGate
from credkeeper.services._shared.ports.token_fetcher import TokenFetcher
from credkeeper.services._shared.ports.token_store import TokenStore
from credkeeper.services.tokens.notifier import ChangeNotifier, Listener

log = logging.getLogger(__name__)


class TokenManager:
    """
    Token lifecycle service (freshness check / single-flight refresh / notify).

    The refresh algorithm is written once against three ports: a
    :class:`TokenStore` deciding staleness and holding values, one
    :class:`RefreshGate` per token kind, and a :class:`TokenFetcher` calling
    the remote authority. Plugging the in-memory store with local gates gives
    a process-local manager; the Redis store with Redis gates shares one token
    across a fleet.

    Callers never see fetch failures, transport faults or gate contention:
    they always get the best value currently stored. While a refresh runs in
    another thread (or process), the previous value is returned; the safety
    margin guarantees it has not truly expired yet.
    """

    def __init__(
        self,
        credential: Credential,
        *,
        fetcher: TokenFetcher,
        store: TokenStore,
        gates: Mapping[TokenKind, RefreshGate] | None = None,
        enable_ticket: bool = False,
        notifier: ChangeNotifier | None = None,
    ) -> None:
        """
        Initialize the manager with its dependencies.

        :param credential: Principal whose tokens are maintained.
        :param fetcher: Adapter performing the remote call.
        :param store: Storage strategy (local or shared).
        :param gates: Single-flight gate per kind; missing kinds get a
            :class:`LocalRefreshGate`.
        :param enable_ticket: Maintain the secondary ticket as well.
        :param notifier: Listener registry; a private one is created when omitted.
        """
        self._credential = credential
        self.fetcher = fetcher
        self.store = store
        provided = dict(gates or {})
        self.gates: dict[TokenKind, RefreshGate] = {
            kind: provided.get(kind) or LocalRefreshGate() for kind in TokenKind
        }
        self._enable_ticket = enable_ticket
        self.notifier = notifier or ChangeNotifier()

    # ------------------------------------------------------------------ #
    # Identity
    # ------------------------------------------------------------------ #

    @property
    def credential(self) -> Credential:
        return self._credential

    @property
    def app_id(self) -> str:
        return self._credential.app_id

    @property
    def secret(self) -> str:
        return self._credential.secret

    @property
    def ticket_enabled(self) -> bool:
        return self._enable_ticket

    # ------------------------------------------------------------------ #
    # Tokens
    # ------------------------------------------------------------------ #

    def init(self) -> None:
        """
        Warm the tokens up: refresh the access token, and the ticket when the
        feature is enabled, without waiting for a first caller.
        """
        self._ensure_fresh(TokenKind.ACCESS_TOKEN)
        if self._enable_ticket:
            self._ensure_fresh(TokenKind.JS_TOKEN)

    def needs_refresh(self, kind: TokenKind) -> bool:
        """Ask the store whether ``kind`` must be refreshed before use."""
        return self.store.needs_refresh(kind)

    def get_access_token(self) -> str | None:
        """
        Return the access token, refreshing it first when stale.

        :returns: The freshly fetched value on success, the previous value if
            a refresh was already in flight or failed, ``None`` only before
            the very first successful fetch.
        """
        self._ensure_fresh(TokenKind.ACCESS_TOKEN)
        return self.store.current(TokenKind.ACCESS_TOKEN)

    def get_ticket(self) -> str | None:
        """
        Return the ticket, refreshing it first when stale.

        When the ticket feature is disabled this never contacts the remote
        authority and simply returns whatever is stored.
        """
        if self._enable_ticket:
            self._ensure_fresh(TokenKind.JS_TOKEN)
        return self.store.current(TokenKind.JS_TOKEN)

    # ------------------------------------------------------------------ #
    # Listeners
    # ------------------------------------------------------------------ #

    def add_listener(self, listener: Listener) -> None:
        self.notifier.subscribe(listener)

    def remove_listener(self, listener: Listener) -> None:
        self.notifier.unsubscribe(listener)

    def remove_all_listeners(self) -> None:
        self.notifier.unsubscribe_all()

    # ------------------------------------------------------------------ #
    # Refresh algorithm
    # ------------------------------------------------------------------ #

    def _ensure_fresh(self, kind: TokenKind) -> None:
        if not self.store.needs_refresh(kind):
            return
        gate = self.gates[kind]
        if not gate.try_acquire():
            # Someone else is refreshing; the stored value is still usable
            return
        try:
            self._refresh(kind)
        finally:
            gate.release()

    def _refresh(self, kind: TokenKind) -> None:
        extra = {"app_id": self.app_id, "kind": kind.name}
        log.debug("token.refresh.start", extra=extra)

        outcome = self._fetch(kind)
        if isinstance(outcome, FetchFailure):
            log.warning(
                "token.refresh.failed: code=%s msg=%s",
                outcome.code,
                outcome.message,
                extra={**extra, "code": outcome.code},
            )
            return
        if not outcome.value:
            log.warning("token.refresh.failed: empty token in response", extra=extra)
            return

        # Persist first, then notify: listeners only ever see stored values
        self.store.persist(kind, outcome.value, outcome.expires_in)
        log.info(
            "token.refresh.ok: token=%s expires_in=%s",
            mask_token(outcome.value),
            outcome.expires_in,
            extra=extra,
        )
        self.notifier.publish(ConfigChangeNotice(app_id=self.app_id, kind=kind, value=outcome.value))

    def _fetch(self, kind: TokenKind) -> FetchOutcome:
        access_token: str | None = None
        if kind is TokenKind.JS_TOKEN:
            access_token = self.get_access_token()
            if not access_token:
                return FetchFailure(code="no_access_token", message="access token unavailable")
        try:
            return self.fetcher.fetch(self._credential, kind, access_token=access_token)
        except TokenFetchError as exc:
            return FetchFailure(code=exc.code, message=exc.message)
        except Exception as exc:
            # Transport faults must never reach callers; the gate is released upstream
            log.warning(
                "token.refresh.error",
                exc_info=True,
                extra={"app_id": self.app_id, "kind": kind.name},
            )
            return FetchFailure(code="fetch_error", message=str(exc) or type(exc).__name__)


__all__ = ["TokenManager"]
