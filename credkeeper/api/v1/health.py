"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app

from credkeeper.api.deps import json_response, timing
from credkeeper.core.extensions import get_token_manager
from credkeeper.services._shared.dto import TokenKind

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Return application health and per-kind token freshness (never token values)."""

    manager = get_token_manager()
    kinds = [TokenKind.ACCESS_TOKEN]
    if manager.ticket_enabled:
        kinds.append(TokenKind.JS_TOKEN)

    tokens = {}
    for kind in kinds:
        tokens[kind.name.lower()] = {
            "present": manager.store.current(kind) is not None,
            "fresh": not manager.needs_refresh(kind),
        }
    status = "ok" if all(t["present"] for t in tokens.values()) else "degraded"
    payload = {
        "status": status,
        "app_id": manager.app_id,
        "store": current_app.config.get("TOKEN_STORE", "local"),
        "tokens": tokens,
        "version": current_app.config.get("APP_VERSION", "dev"),
    }
    return json_response(payload)
