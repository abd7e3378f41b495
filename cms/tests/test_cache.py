"""Tests for TTLCache. Pure logic, no mocks needed."""

import time

from cms.services.cache import TTLCache


def test_set_and_get_returns_value():
    cache = TTLCache(ttl=60)
    cache.set("k", "v")
    assert cache.get("k") == "v"
    assert "k" in cache


def test_expired_key_returns_none():
    cache = TTLCache(ttl=0.01)
    cache.set("k", "v")
    time.sleep(0.02)
    assert cache.get("k") is None
    assert "k" not in cache


def test_per_entry_ttl_overrides_default():
    cache = TTLCache(ttl=60)
    cache.set("short", 1, ttl=0.01)
    cache.set("long", 2)
    time.sleep(0.02)
    assert cache.get("short") is None
    assert cache.get("long") == 2


def test_max_size_evicts_oldest():
    cache = TTLCache(ttl=60, max_size=2)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)
    assert cache.get("a") is None  # evicted
    assert cache.get("b") == 2
    assert cache.get("c") == 3
    assert len(cache) == 2


def test_clear_empties_cache():
    cache = TTLCache()
    cache.set("a", 1)
    cache.clear()
    assert len(cache) == 0


def test_unbounded_cache_keeps_live_entries():
    cache = TTLCache(ttl=60, max_size=None)
    for i in range(500):
        cache.set(str(i), i)
    assert cache.get("0") == 0
    assert len(cache) == 500


def test_unbounded_cache_drops_expired_on_set():
    cache = TTLCache(ttl=60, max_size=None)
    cache.set("old", 1, ttl=0.01)
    time.sleep(0.02)
    cache.set("new", 2)
    assert len(cache) == 1
    assert cache.get("new") == 2
