"""Composition root for the completion client.

One :class:`CompletionContext` is built at startup and passed to whatever
needs the pool, caches or engine; nothing in the package keeps module-level
mutable state. Use it as an async context manager so the janitor starts and
every pooled client is closed on exit::

    async with CompletionContext.from_settings(Settings()) as ctx:
        result = await ctx.engine.complete(body, ProviderConfig.from_settings(ctx.settings))
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from .base.cache import EphemeralResultCache, TemplateCache
from .base.decoding import DEFAULT_REASONING_TAGS, ReasoningTags
from .base.http.pool import ClientFactory, ProviderClientPool
from .base.janitor import CacheJanitor
from .base.logging import get_logger, normalized_log_event
from .base.streaming import StreamingCompletionEngine
from .base.timeouts import TimeoutConfig
from .base.tokens import TokenCounter
from .config import Settings
from .config import defaults as d


class CompletionContext:
    """Owns the client pool, both caches, the engine and the janitor."""

    def __init__(
        self,
        settings: Settings,
        *,
        client_factory: Optional[ClientFactory] = None,
        timeout_config: Optional[TimeoutConfig] = None,
        reasoning_tags: ReasoningTags = DEFAULT_REASONING_TAGS,
    ) -> None:
        self.settings = settings
        self._logger = get_logger("context")
        self.pool = ProviderClientPool(
            settings.get_int("pool.maxSize", d.POOL_MAX_SIZE),
            client_factory=client_factory,
            timeout_config=timeout_config,
        )
        self.template_cache = TemplateCache(settings.get_int("cache.template.maxSize", d.TEMPLATE_CACHE_MAX_SIZE))
        self.ephemeral_cache = EphemeralResultCache(
            settings.get_int("cache.ephemeral.maxSize", d.EPHEMERAL_CACHE_MAX_SIZE),
            settings.get_float("cache.ephemeral.ttlSeconds", d.EPHEMERAL_CACHE_TTL_SECONDS),
        )
        self.token_counter = TokenCounter(settings.get("tokens.encoding", d.TOKEN_ENCODING))
        self.engine = StreamingCompletionEngine(
            self.pool,
            ceilings=self._ceilings(),
            token_counter=self.token_counter,
            reasoning_tags=reasoning_tags,
            structured_field=settings.get("decoder.structuredField", d.STRUCTURED_FIELD),
            diagnostic_prefix_chars=settings.get_int("decoder.diagnosticPrefixChars", d.DIAGNOSTIC_PREFIX_CHARS),
        )
        self.janitor = CacheJanitor(
            self.template_cache,
            self.ephemeral_cache,
            settings.get_float("janitor.intervalSeconds", d.JANITOR_INTERVAL_SECONDS),
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **kwargs: Any) -> "CompletionContext":
        return cls(settings or Settings(), **kwargs)

    def _ceilings(self) -> Dict[str, int]:
        defaults = {
            "chat": d.CHAT_CEILING,
            "tool": d.TOOL_CEILING,
            "summary": d.SUMMARY_CEILING,
            "reasoning": d.REASONING_CEILING,
        }
        return {k: self.settings.get_int(f"stream.ceilings.{k}", v) for k, v in defaults.items()}

    def start(self) -> None:
        """Start the janitor; requires a running event loop."""
        self.janitor.start()

    async def clear_all_caches(self) -> Dict[str, int]:
        """Empty both caches and close every pooled client."""
        counts = {
            "template": self.template_cache.clear(),
            "ephemeral": self.ephemeral_cache.clear(),
            "pool": await self.pool.close_all(),
        }
        normalized_log_event(self._logger, "context.clear_all", phase="maintenance", emitted=None, **counts)
        return counts

    async def aclose(self) -> None:
        await self.janitor.stop()
        await self.pool.close_all()

    async def __aenter__(self) -> "CompletionContext":
        self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


__all__ = ["CompletionContext"]
