"""Expose the application factory and token manager at package level.

Provide convenient access to :func:`credkeeper.factory.create_app` and
:class:`credkeeper.services.tokens.TokenManager` so callers can
``from credkeeper import TokenManager`` without traversing the package structure.
"""

from __future__ import annotations

from .factory import create_app
from .services.tokens import TokenManager, build_token_manager

__all__ = ["create_app", "TokenManager", "build_token_manager"]
