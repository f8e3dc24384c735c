"""Global pytest fixtures for the credkeeper test-suite."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any, Callable

import fakeredis
import pytest
from flask import Flask

from credkeeper import create_app
from credkeeper.core.config import TestingConfig
from credkeeper.services._shared.dto import Credential
from credkeeper.services._shared.ports import InMemoryTokenStore, StubTokenFetcher
from credkeeper.services.tokens import TokenManager


@pytest.fixture()
def credential() -> Credential:
    """Principal shared by the unit tests."""

    return Credential(app_id="wx-test", secret="secret-test")


@pytest.fixture()
def fetcher() -> StubTokenFetcher:
    """Deterministic fetcher issuing ``<prefix>-<n>`` tokens valid for 7200s."""

    return StubTokenFetcher()


@pytest.fixture()
def store() -> InMemoryTokenStore:
    """Process-local token store with the default 100s margin."""

    return InMemoryTokenStore()


@pytest.fixture()
def manager(credential: Credential, fetcher: StubTokenFetcher, store: InMemoryTokenStore) -> TokenManager:
    """Token manager wired to in-memory doubles (ticket feature disabled)."""

    return TokenManager(credential, fetcher=fetcher, store=store)


@pytest.fixture()
def fake_redis() -> fakeredis.FakeRedis:
    """Provide a fresh FakeRedis instance for each test."""

    r = fakeredis.FakeRedis()
    r.flushall()
    return r


@pytest.fixture()
def broken_redis() -> fakeredis.FakeRedis:
    """FakeRedis whose server is disconnected: every command raises ``ConnectionError``."""

    server = fakeredis.FakeServer()
    server.connected = False
    return fakeredis.FakeRedis(server=server)


@pytest.fixture()
def app_fetcher() -> StubTokenFetcher:
    """Fetcher injected into the Flask application."""

    return StubTokenFetcher()


@pytest.fixture()
def app(app_fetcher: StubTokenFetcher) -> Generator[Flask, None, None]:
    """Create a Flask application configured for testing.

    Returns
    -------
    Generator[Flask, None, None]
        Application using the process-local store and the stub fetcher.
    """

    application = create_app(TestingConfig, token_fetcher=app_fetcher)
    with application.app_context():
        yield application


@pytest.fixture()
def client(app: Flask) -> Any:
    """Return a Flask test client."""

    return app.test_client()


@pytest.fixture()
def freeze_time() -> Callable[[str | None], Any]:
    """Factory returning :func:`freezegun.freeze_time`.

    Examples
    --------
    >>> def test_with_frozen_time(freeze_time):
    ...     with freeze_time("2024-01-01") as frozen:
    ...         frozen.tick(timedelta(seconds=1))
    """

    from freezegun import freeze_time as _freeze_time

    def _factory(target: str | None = None) -> Any:
        return _freeze_time(target or "2024-01-01")

    return _factory
