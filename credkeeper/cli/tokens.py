"""Flask CLI commands for inspecting the maintained tokens."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from credkeeper.core.extensions import get_token_manager
from credkeeper.services._shared.dto import TokenKind

LOGGER = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    """Raise logging verbosity for the token services when requested."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.getLogger("credkeeper.services.tokens").setLevel(level)
    LOGGER.setLevel(level)


@click.group("token")
@click.option("--verbose", is_flag=True, help="Enable verbose logging for token refreshes.")
def token_cli(verbose: bool) -> None:
    """Inspect and refresh the credential tokens."""
    _configure_logging(verbose)


@token_cli.command("get")
@click.option("--ticket", is_flag=True, help="Print the jsapi ticket instead of the access token.")
@with_appcontext
def get_command(ticket: bool) -> None:
    """Print the current token, refreshing it first when stale."""
    manager = get_token_manager()
    if ticket and not manager.ticket_enabled:
        raise click.UsageError("The ticket feature is disabled (set TOKEN_ENABLE_TICKET=1).")
    value = manager.get_ticket() if ticket else manager.get_access_token()
    if not value:
        raise click.ClickException("No token available; check the logs for the fetch failure.")
    click.echo(value)


@token_cli.command("status")
@with_appcontext
def status_command() -> None:
    """Print whether each maintained token is present and fresh."""
    manager = get_token_manager()
    click.echo(f"app_id: {manager.app_id}")
    for kind in TokenKind:
        if kind is TokenKind.JS_TOKEN and not manager.ticket_enabled:
            click.echo(f"  {kind.name.lower():<13} disabled")
            continue
        present = manager.store.current(kind) is not None
        fresh = not manager.needs_refresh(kind)
        click.echo(f"  {kind.name.lower():<13} present={present!s:<5}  fresh={fresh}")
