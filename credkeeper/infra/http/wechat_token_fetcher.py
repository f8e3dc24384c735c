"""``requests``-based adapter for the WeChat-style token endpoints."""

from __future__ import annotations

import logging
from typing import Any

import requests
from marshmallow import Schema, ValidationError

from credkeeper.schemas.token import AccessTokenResponseSchema, TicketResponseSchema
from credkeeper.services._shared.dto import (
    Credential,
    FetchFailure,
    FetchOutcome,
    FetchResult,
    TokenKind,
)
from credkeeper.services._shared.ports import TokenFetcher

log = logging.getLogger(__name__)

TOKEN_PATH = "/cgi-bin/token"
TICKET_PATH = "/cgi-bin/ticket/getticket"


class WeChatTokenFetcher(TokenFetcher):
    """
    Obtain access tokens and ``jsapi`` tickets over HTTP.

    Every failure mode is returned as a :class:`FetchFailure` instead of
    raised: non-200 responses (``http_<status>``), network faults and
    timeouts (``transport_error``), unparseable bodies (``invalid_response``)
    and authority errors (the body's ``errcode``/``errmsg``).

    :param base_url: Scheme and host of the authority.
    :param timeout: Per-request timeout in seconds.
    :param session: Optional pre-configured :class:`requests.Session`.
    """

    def __init__(
        self,
        base_url: str = "https://api.weixin.qq.com",
        *,
        timeout: float = 10,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(
        self,
        credential: Credential,
        kind: TokenKind,
        *,
        access_token: str | None = None,
    ) -> FetchOutcome:
        if kind is TokenKind.ACCESS_TOKEN:
            params = {
                "grant_type": "client_credential",
                "appid": credential.app_id,
                "secret": credential.secret,
            }
            return self._get(TOKEN_PATH, params, AccessTokenResponseSchema(), "access_token")

        if not access_token:
            return FetchFailure(code="no_access_token", message="ticket requires an access token")
        params = {"access_token": access_token, "type": "jsapi"}
        return self._get(TICKET_PATH, params, TicketResponseSchema(), "ticket")

    def _get(self, path: str, params: dict[str, str], schema: Schema, field: str) -> FetchOutcome:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            log.warning("token.fetch.transport_error: %s", type(exc).__name__)
            return FetchFailure(code="transport_error", message=str(exc))

        if resp.status_code != requests.codes.ok:
            return FetchFailure(code=f"http_{resp.status_code}", message=resp.reason or "")

        try:
            payload: dict[str, Any] = schema.load(resp.json())
        except (ValueError, ValidationError) as exc:
            # requests raises a ValueError subclass on malformed JSON
            return FetchFailure(code="invalid_response", message=str(exc))

        value = payload.get(field)
        if payload["errcode"] != 0 or not value:
            return FetchFailure(code=payload["errcode"], message=payload["errmsg"])
        return FetchResult(value=value, expires_in=payload["expires_in"])
