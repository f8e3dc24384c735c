# comments in English; reST docstrings strict
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Final

SAFETY_MARGIN_SECONDS: Final[int] = 100


class TokenKind(Enum):
    """
    Kinds of credential tokens maintained per principal.

    Each member carries the key prefixes used by the shared cache, so the
    Redis layout stays ``<prefix>_<appid>``.
    """

    ACCESS_TOKEN = ("accessToken", "accessTokenLock")
    JS_TOKEN = ("jsApiTicket", "jsApiTicketLock")

    @property
    def key_prefix(self) -> str:
        return self.value[0]

    @property
    def lock_prefix(self) -> str:
        return self.value[1]

    def key_for(self, app_id: str) -> str:
        """Return the shared-cache key holding this kind for ``app_id``."""
        return f"{self.key_prefix}_{app_id}"

    def lock_key_for(self, app_id: str) -> str:
        """Return the distributed-lock key guarding refreshes of this kind."""
        return f"{self.lock_prefix}_{app_id}"


@dataclass(frozen=True, slots=True)
class Credential:
    """
    Identity of the remote principal.

    :param app_id: Public application identifier (``appid``).
    :type app_id: str
    :param secret: Application secret.
    :type secret: str
    """

    app_id: str
    secret: str

    def __repr__(self) -> str:
        return f"Credential(app_id={self.app_id!r}, secret='***')"


@dataclass(frozen=True, slots=True)
class Token:
    """
    A token value with its margin-adjusted expiry.

    :param value: Token string as issued by the authority.
    :type value: str
    :param expires_at: Instant (UTC) after which the token is considered stale.
    :type expires_at: datetime
    """

    value: str
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class FetchResult:
    """
    Successful answer of the remote authority.

    :param value: Token string (may be empty if the authority misbehaves).
    :type value: str
    :param expires_in: Lifetime in seconds as stated by the authority.
    :type expires_in: int
    """

    value: str
    expires_in: int


@dataclass(frozen=True, slots=True)
class FetchFailure:
    """
    Failed answer (or failed call) to the remote authority.

    :param code: ``errcode`` reported by the authority or a local marker such
        as ``"transport_error"``.
    :type code: int | str
    :param message: Human-readable reason.
    :type message: str
    """

    code: int | str
    message: str


FetchOutcome = FetchResult | FetchFailure


@dataclass(frozen=True, slots=True)
class ConfigChangeNotice:
    """
    Published once per successful refresh.

    :param app_id: Principal whose token changed.
    :type app_id: str
    :param kind: Which token changed.
    :type kind: TokenKind
    :param value: The new token value.
    :type value: str
    """

    app_id: str
    kind: TokenKind
    value: str
