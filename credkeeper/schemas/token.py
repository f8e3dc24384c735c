"""Marshmallow schemas describing the token authority responses."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields


class _AuthorityResponseSchema(Schema):
    """Fields shared by every authority response (error indication)."""

    class Meta:
        unknown = EXCLUDE

    errcode = fields.Integer(load_default=0)
    errmsg = fields.String(load_default="")
    expires_in = fields.Integer(load_default=0)


class AccessTokenResponseSchema(_AuthorityResponseSchema):
    """Payload of ``GET /cgi-bin/token``."""

    access_token = fields.String(load_default=None, allow_none=True)


class TicketResponseSchema(_AuthorityResponseSchema):
    """Payload of ``GET /cgi-bin/ticket/getticket``."""

    ticket = fields.String(load_default=None, allow_none=True)
