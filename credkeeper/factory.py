"""Application factory wiring extensions, blueprints and CLI commands."""

from __future__ import annotations

from flask import Flask

from credkeeper.core.config import BaseConfig, get_config
from credkeeper.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
    token_fetcher: object | None = None,
) -> Flask:
    """Build and configure the Flask application.

    ``token_fetcher`` overrides the HTTP adapter used by the token manager.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    if token_fetcher is not None:
        app.extensions["token_fetcher"] = token_fetcher

    from credkeeper.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from credkeeper.api import init_app as init_api

    init_api(app)

    from credkeeper.core import errors

    errors.init_app(app)

    from credkeeper import cli as app_cli

    app_cli.init_app(app)

    return app
