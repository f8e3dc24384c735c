"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

STORE_LOCAL: Final[str] = "local"
STORE_REDIS: Final[str] = "redis"

# Loads .env in development (no-op when the file is missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable.

    Blank or non-numeric values fall back to ``default``.
    """
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    try:
        return int(val.strip())
    except ValueError:
        return default


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    TOKEN_APP_ID: str
        Identifier of the remote principal (``appid``).
    TOKEN_APP_SECRET: str
        Secret paired with ``TOKEN_APP_ID``.
    TOKEN_ENABLE_TICKET: bool
        Whether the secondary ``jsapi_ticket`` is maintained.
    TOKEN_STORE: str
        ``"local"`` for a process-local store or ``"redis"`` for the shared one.
    TOKEN_SAFETY_MARGIN: int
        Seconds subtracted from the authority expiry before a token is stale.
    TOKEN_LOCK_TIMEOUT: int
        Auto-expiry (seconds) of the distributed refresh lock.
    TOKEN_API_BASE_URL: str
        Base URL of the remote token authority.
    TOKEN_HTTP_TIMEOUT: int
        Timeout (seconds) applied to each remote fetch.
    TOKEN_EAGER_INIT: bool
        Fetch tokens while the application starts instead of on first use.
    REDIS_URL: str | None
        Connection URL for the shared cache; required by the ``redis`` store.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    DEBUG: bool
        Toggles Flask debug mode.
    TESTING: bool
        Enables Flask testing mode when ``True``.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Remote principal
    TOKEN_APP_ID = os.getenv("TOKEN_APP_ID", "")
    TOKEN_APP_SECRET = os.getenv("TOKEN_APP_SECRET", "")
    TOKEN_ENABLE_TICKET = env_bool("TOKEN_ENABLE_TICKET", False)

    # Token lifecycle
    TOKEN_STORE = os.getenv("TOKEN_STORE", STORE_LOCAL).strip().lower()
    TOKEN_SAFETY_MARGIN = env_int("TOKEN_SAFETY_MARGIN", 100)
    TOKEN_LOCK_TIMEOUT = env_int("TOKEN_LOCK_TIMEOUT", 30)
    TOKEN_EAGER_INIT = env_bool("TOKEN_EAGER_INIT", False)

    # Remote authority
    TOKEN_API_BASE_URL = os.getenv("TOKEN_API_BASE_URL", "https://api.weixin.qq.com")
    TOKEN_HTTP_TIMEOUT = env_int("TOKEN_HTTP_TIMEOUT", 10)

    # Shared cache
    REDIS_URL = os.getenv("REDIS_URL")

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Always uses the process-local store with a placeholder credential so
      tests never need Redis or a real principal.
    - Propagates exceptions so pytest can surface tracebacks directly.
    """

    TESTING = True
    DEBUG = False
    TOKEN_APP_ID = "wx-test"
    TOKEN_APP_SECRET = "secret-test"
    TOKEN_STORE = STORE_LOCAL
    TOKEN_EAGER_INIT = False
    REDIS_URL = None
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug disabled and warms the tokens up at start-up unless
    ``TOKEN_EAGER_INIT`` says otherwise.
    """

    DEBUG = False
    TOKEN_EAGER_INIT = env_bool("TOKEN_EAGER_INIT", True)
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
