"""Periodic cache maintenance.

:class:`CacheJanitor` runs as an asyncio task independent of any request.
Each sweep trims the template cache back to capacity and purges expired
ephemeral entries. The client pool is never touched here; use
``CompletionContext.clear_all_caches`` for a full reset.
"""
from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from dataclasses import dataclass
from typing import Optional

from .cache import EphemeralResultCache, TemplateCache
from .logging import get_logger, normalized_log_event


@dataclass(frozen=True)
class SweepReport:
    template_trimmed: int
    ephemeral_expired: int


class CacheJanitor:
    """Background sweeper for the template and ephemeral caches."""

    def __init__(
        self,
        template_cache: TemplateCache,
        ephemeral_cache: EphemeralResultCache,
        interval_seconds: float = 300,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.template_cache = template_cache
        self.ephemeral_cache = ephemeral_cache
        self.interval_seconds = interval_seconds
        self._logger = logger or get_logger("janitor")
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def sweep(self) -> SweepReport:
        report = SweepReport(
            template_trimmed=self.template_cache.trim_to_capacity(),
            ephemeral_expired=self.ephemeral_cache.purge_expired(),
        )
        normalized_log_event(
            self._logger,
            "janitor.sweep",
            phase="janitor",
            emitted=None,
            level=logging.DEBUG,
            template_trimmed=report.template_trimmed,
            ephemeral_expired=report.ephemeral_expired,
        )
        return report

    def start(self) -> None:
        """Schedule the sweep loop on the running event loop (idempotent)."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop(), name="completion-cache-janitor")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                self.sweep()
            except Exception as exc:  # noqa: BLE001 - keep sweeping on later ticks
                self._logger.error("cache sweep failed: %s", exc)


__all__ = ["CacheJanitor", "SweepReport"]
