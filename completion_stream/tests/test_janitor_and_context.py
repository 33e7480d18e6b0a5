from __future__ import annotations

import asyncio

import pytest

from completion_stream.base.cache import EphemeralResultCache, TemplateCache
from completion_stream.base.janitor import CacheJanitor
from completion_stream.config import Settings
from completion_stream.context import CompletionContext


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_sweep_trims_templates_and_purges_expired():
    clock = _Clock()
    templates = TemplateCache(max_size=3)
    for key in "abcd":
        templates.put(key, key)
    templates.max_size = 2
    ephemeral = EphemeralResultCache(max_size=5, ttl_seconds=10, clock=clock)
    ephemeral.put("old", 1)
    clock.now = 20
    ephemeral.put("fresh", 2)

    report = CacheJanitor(templates, ephemeral, 60).sweep()

    assert report.template_trimmed == 1  # nosec B101
    assert report.ephemeral_expired == 1  # nosec B101
    assert list(ephemeral.keys()) == ["fresh"]  # nosec B101


@pytest.mark.asyncio
async def test_janitor_runs_periodically_and_stops():
    clock = _Clock()
    ephemeral = EphemeralResultCache(max_size=5, ttl_seconds=1, clock=clock)
    ephemeral.put("k", 1)
    clock.now = 5
    janitor = CacheJanitor(TemplateCache(), ephemeral, interval_seconds=0.01)

    janitor.start()
    janitor.start()
    assert janitor.running  # nosec B101
    for _ in range(100):
        if len(ephemeral) == 0:
            break
        await asyncio.sleep(0.01)
    await janitor.stop()

    assert len(ephemeral) == 0  # nosec B101
    assert not janitor.running  # nosec B101
    await janitor.stop()


def test_janitor_rejects_bad_interval():
    with pytest.raises(ValueError):
        CacheJanitor(TemplateCache(), EphemeralResultCache(), 0)


def test_context_wires_settings():
    settings = Settings(
        {"pool": {"maxSize": 2}, "cache": {"template": {"maxSize": 7}}, "stream": {"ceilings": {"tool": 99}}},
        environ={},
    )
    ctx = CompletionContext(settings)
    assert ctx.pool.max_size == 2  # nosec B101
    assert ctx.template_cache.max_size == 7  # nosec B101
    assert ctx.ephemeral_cache.ttl_seconds == 300  # nosec B101
    assert ctx.engine.ceiling_for("tool") == 99  # nosec B101
    assert ctx.engine.ceiling_for("chat") == 75000  # nosec B101
    assert ctx.janitor.interval_seconds == 300  # nosec B101


@pytest.mark.asyncio
async def test_clear_all_caches_closes_pool(fake_provider):
    ctx = CompletionContext(Settings(environ={}), client_factory=fake_provider)
    ctx.template_cache.put("t", "x")
    ctx.ephemeral_cache.put("e", 1)
    (await ctx.pool.get("http://a/v1", "k")).client

    counts = await ctx.clear_all_caches()

    assert counts == {"template": 1, "ephemeral": 1, "pool": 1}  # nosec B101
    assert len(ctx.pool) == 0 and fake_provider.clients[0].closed  # nosec B101


@pytest.mark.asyncio
async def test_context_manager_starts_and_stops_janitor(fake_provider):
    async with CompletionContext(Settings(environ={}), client_factory=fake_provider) as ctx:
        assert ctx.janitor.running  # nosec B101
        (await ctx.pool.get("http://a/v1", "k")).client
    assert not ctx.janitor.running  # nosec B101
    assert fake_provider.clients[0].closed  # nosec B101
