from __future__ import annotations

import pytest

from completion_stream.base.cache import BoundedCache, EphemeralResultCache, TemplateCache


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_insert_beyond_capacity_evicts_oldest_inserted():
    cache = TemplateCache(max_size=3)
    for key in ("a", "b", "c"):
        cache.put(key, key.upper())
    cache.get("a")  # reads do not protect from eviction
    cache.put("d", "D")
    assert len(cache) == 3  # nosec B101
    assert "a" not in cache  # nosec B101
    assert cache.get("d") == "D"  # nosec B101


def test_rewrite_moves_key_to_newest():
    cache = BoundedCache(2)
    cache.put("a", 1)
    cache.put("b", 2)
    cache.put("a", 3)
    cache.put("c", 4)
    assert list(cache.keys()) == ["a", "c"]  # nosec B101
    assert cache.get("a") == 3  # nosec B101


def test_ttl_expiry_applies_before_sweep():
    clock = _Clock()
    cache = EphemeralResultCache(max_size=5, ttl_seconds=300, clock=clock)
    cache.put_for_user("u1", "chat", {"body": 1})
    clock.now = 299
    assert cache.get_for_user("u1", "chat") == {"body": 1}  # nosec B101
    clock.now = 301
    assert cache.get_for_user("u1", "chat") is None  # nosec B101
    assert len(cache) == 0  # nosec B101


def test_purge_expired_only_drops_old_entries():
    clock = _Clock()
    cache = EphemeralResultCache(max_size=5, ttl_seconds=10, clock=clock)
    cache.put("old", 1)
    clock.now = 8
    cache.put("new", 2)
    clock.now = 12
    assert cache.purge_expired() == 1  # nosec B101
    assert list(cache.keys()) == ["new"]  # nosec B101


def test_stats_track_hits_and_misses():
    cache = BoundedCache(2, name="t")
    cache.put("a", 1)
    cache.get("a")
    cache.get("missing")
    stats = cache.stats()
    assert (stats.hits, stats.misses, stats.size) == (1, 1, 1)  # nosec B101
    assert stats.hit_rate == 0.5  # nosec B101


def test_clear_with_pattern_and_delete():
    cache = BoundedCache(5)
    for key in ("u1:chat", "u1:tool", "u2:chat"):
        cache.put(key, 1)
    assert cache.clear("u1:") == 2  # nosec B101
    assert cache.delete("u2:chat") is True  # nosec B101
    assert cache.delete("u2:chat") is False  # nosec B101
    assert cache.clear() == 0  # nosec B101


def test_trim_to_capacity_after_shrink():
    cache = TemplateCache(max_size=4)
    for key in "abcd":
        cache.put(key, key)
    cache.max_size = 2
    assert cache.trim_to_capacity() == 2  # nosec B101
    assert list(cache.keys()) == ["c", "d"]  # nosec B101


@pytest.mark.asyncio
async def test_get_or_set_caches_and_forces_fresh():
    cache = BoundedCache(3)
    calls = []

    async def build():
        calls.append(1)
        return f"v{len(calls)}"

    assert await cache.get_or_set("k", build) == "v1"  # nosec B101
    assert await cache.get_or_set("k", build) == "v1"  # nosec B101
    assert await cache.get_or_set("k", build, force_fresh=True) == "v2"  # nosec B101
    assert cache.get("k") == "v2"  # nosec B101


@pytest.mark.asyncio
async def test_get_or_set_does_not_store_none():
    cache = BoundedCache(3)
    assert await cache.get_or_set("k", lambda: None) is None  # nosec B101
    assert "k" not in cache  # nosec B101


def test_rejects_zero_capacity():
    with pytest.raises(ValueError):
        BoundedCache(0)
