"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP directly. They serve as stable contracts between adapters
(fetchers, stores) and the token services.

The translation to HTTP responses (RFC 7807) is handled by
``credkeeper/core/errors.py``.
"""

from __future__ import annotations

from dataclasses import dataclass

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from adapters or domain logic.
    """

    pass


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class TokenFetchError(ServiceError):
    """
    Raised by a fetcher when the remote authority could not issue a token.

    The token manager treats it exactly like a returned failure: nothing is
    persisted and the previous token stays in place.

    :param code: Error code reported by the authority (or a local marker).
    :type code: int | str
    :param message: Short human-readable explanation.
    :type message: str
    """

    code: int | str
    message: str

    def __str__(self) -> str:  # pragma: no cover
        return f"Token fetch failed: {self.code}, {self.message}"


class ConfigurationError(ServiceError):
    """
    Raised when the token services cannot be wired from configuration
    (unknown store backend, missing Redis URL, missing credential).
    """
