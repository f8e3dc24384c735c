# tests/unit/infra/test_redis_token_store.py
"""
Unit tests for RedisTokenStore using fakeredis.

These tests exercise the main flows:
- freshness derived from the remaining TTL and the safety margin
- persist writes the authority's lifetime verbatim
- values shared between stores (i.e. processes) through Redis
- tolerance of an unreachable Redis
"""

from __future__ import annotations

import threading
import time

import pytest

from credkeeper.infra.redis import RedisRefreshGate, RedisTokenStore
from credkeeper.services._shared.dto import TokenKind
from credkeeper.services._shared.ports import StubTokenFetcher
from credkeeper.services.tokens import TokenManager

ACCESS = TokenKind.ACCESS_TOKEN
TICKET = TokenKind.JS_TOKEN


@pytest.fixture
def store(fake_redis):
    """Provide a RedisTokenStore backed by FakeRedis."""
    return RedisTokenStore(fake_redis, app_id="wx-test", margin_seconds=100)


def test_key_names_follow_kind_prefix_and_app_id(store):
    assert store._k(ACCESS) == "accessToken_wx-test"
    assert store._k(TICKET) == "jsApiTicket_wx-test"


def test_absent_key_needs_refresh(store):
    assert store.needs_refresh(ACCESS) is True
    assert store.current(ACCESS) is None


def test_ttl_below_margin_is_stale_but_still_served(store, fake_redis):
    fake_redis.set("accessToken_wx-test", "near-expiry", ex=50)

    assert store.needs_refresh(ACCESS) is True
    # Present value is kept as fallback while a refresh runs
    assert store.current(ACCESS) == "near-expiry"


def test_ttl_above_margin_is_fresh(store, fake_redis):
    fake_redis.set("accessToken_wx-test", "shared", ex=150)

    assert store.needs_refresh(ACCESS) is False
    assert store.current(ACCESS) == "shared"


def test_key_without_expiry_needs_refresh(store, fake_redis):
    fake_redis.set("accessToken_wx-test", "forever")

    assert store.remaining_ttl(ACCESS) is None
    assert store.needs_refresh(ACCESS) is True
    assert store.current(ACCESS) == "forever"


def test_persist_writes_lifetime_verbatim(store, fake_redis):
    store.persist(ACCESS, "tok", 7200)

    assert fake_redis.get("accessToken_wx-test") == b"tok"
    ttl = fake_redis.ttl("accessToken_wx-test")
    assert 7190 < ttl <= 7200
    assert store.needs_refresh(ACCESS) is False
    assert store.current(ACCESS) == "tok"


def test_kinds_are_stored_independently(store, fake_redis):
    store.persist(ACCESS, "tok", 7200)
    store.persist(TICKET, "tkt", 7200)

    assert fake_redis.get("accessToken_wx-test") == b"tok"
    assert fake_redis.get("jsApiTicket_wx-test") == b"tkt"


def test_value_is_shared_between_stores(store, fake_redis):
    """A second process sees the value written by the first."""
    other = RedisTokenStore(fake_redis, app_id="wx-test")
    store.persist(ACCESS, "from-a", 7200)

    assert other.needs_refresh(ACCESS) is False
    assert other.current(ACCESS) == "from-a"


def test_manager_reuses_shared_value_without_fetch(store, fake_redis, credential):
    fake_redis.set("accessToken_wx-test", "shared", ex=150)
    fetcher = StubTokenFetcher()
    manager = TokenManager(credential, fetcher=fetcher, store=store)

    assert manager.get_access_token() == "shared"
    assert fetcher.calls == []


def test_manager_refreshes_near_expiry_value(store, fake_redis, credential):
    fake_redis.set("accessToken_wx-test", "old", ex=50)
    fetcher = StubTokenFetcher()
    manager = TokenManager(credential, fetcher=fetcher, store=store)

    assert manager.get_access_token() == "accessToken-1"
    assert fake_redis.get("accessToken_wx-test") == b"accessToken-1"
    assert fake_redis.ttl("accessToken_wx-test") > 100


def test_unreachable_redis_reads_as_absent(broken_redis):
    store = RedisTokenStore(broken_redis, app_id="wx-test")

    assert store.needs_refresh(ACCESS) is True
    assert store.current(ACCESS) is None
    assert store.remaining_ttl(ACCESS) is None


def test_failed_write_keeps_process_snapshot(broken_redis, caplog):
    store = RedisTokenStore(broken_redis, app_id="wx-test")

    store.persist(ACCESS, "tok", 7200)

    assert store.current(ACCESS) == "tok"
    assert any(r.getMessage() == "redis.token_store.write_failed" for r in caplog.records)


def _shared_manager(fake_redis, credential, fetcher):
    """Manager wired like one process of a fleet sharing ``fake_redis``."""
    gates = {
        kind: RedisRefreshGate.for_kind(fake_redis, app_id="wx-test", kind=kind)
        for kind in TokenKind
    }
    return TokenManager(
        credential,
        fetcher=fetcher,
        store=RedisTokenStore(fake_redis, app_id="wx-test"),
        gates=gates,
    )


def test_second_process_serves_old_value_while_first_refreshes(fake_redis, credential):
    fake_redis.set("accessToken_wx-test", "old", ex=50)
    release_fetch = threading.Event()
    fetcher_a = StubTokenFetcher(gate=release_fetch)
    fetcher_b = StubTokenFetcher()
    manager_a = _shared_manager(fake_redis, credential, fetcher_a)
    manager_b = _shared_manager(fake_redis, credential, fetcher_b)

    result_a: list[str | None] = []
    refresher = threading.Thread(target=lambda: result_a.append(manager_a.get_access_token()))
    refresher.start()
    deadline = time.monotonic() + 5
    while fetcher_a.calls_for(ACCESS) == 0 and time.monotonic() < deadline:
        time.sleep(0.005)

    # The lock is held by the first process: the second one does not fetch
    assert fake_redis.exists("accessTokenLock_wx-test") == 1
    assert manager_b.get_access_token() == "old"
    assert fetcher_b.calls == []

    release_fetch.set()
    refresher.join(timeout=5)

    assert result_a == ["accessToken-1"]
    assert fake_redis.exists("accessTokenLock_wx-test") == 0
    assert manager_b.get_access_token() == "accessToken-1"
    assert fetcher_b.calls == []
