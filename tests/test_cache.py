"""Tests for MemoryCache."""

import time

import pytest

from cache.cache import MemoryCache


@pytest.fixture
def cache(fake_clock):
    c = MemoryCache(ttl=300, clock=fake_clock, start_sweeper=False)
    yield c
    c.close()


def test_get_missing_key(cache):
    assert cache.get("nope") == (None, False)


def test_entry_visible_until_expiry(cache, fake_clock):
    cache.set("k", "v")
    fake_clock.advance(299.999)
    assert cache.get("k") == ("v", True)


def test_entry_invisible_at_expiry(cache, fake_clock):
    cache.set("k", "v")
    fake_clock.advance(300)
    assert cache.get("k") == (None, False)
    # read never removes the entry
    assert len(cache) == 1


def test_set_overwrites_and_resets_expiry(cache, fake_clock):
    cache.set("k", 1)
    fake_clock.advance(200)
    cache.set("k", 2)
    fake_clock.advance(200)
    assert cache.get("k") == (2, True)


def test_delete_and_clear(cache):
    cache.set("a", 1)
    cache.set("b", 2)
    cache.delete("a")
    assert cache.get("a") == (None, False)
    cache.clear()
    assert len(cache) == 0
    assert cache.get("b") == (None, False)


def test_cleanup_expired_removes_only_expired(cache, fake_clock):
    cache.set("old", 1)
    fake_clock.advance(200)
    cache.set("new", 2)
    fake_clock.advance(100)

    assert cache.cleanup_expired() == 1
    assert len(cache) == 1
    assert cache.get("new") == (2, True)


def test_invalid_ttl():
    with pytest.raises(ValueError):
        MemoryCache(ttl=0, start_sweeper=False)


def test_background_sweep_runs():
    c = MemoryCache(ttl=0.01, sweep_interval=0.02)
    try:
        c.set("k", "v")
        deadline = 50
        while len(c) and deadline:
            time.sleep(0.02)
            deadline -= 1
        assert len(c) == 0
    finally:
        c.close()
