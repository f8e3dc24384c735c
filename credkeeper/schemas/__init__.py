"""Marshmallow schemas for remote authority payloads."""

from __future__ import annotations

from .token import AccessTokenResponseSchema, TicketResponseSchema

__all__ = ["AccessTokenResponseSchema", "TicketResponseSchema"]
