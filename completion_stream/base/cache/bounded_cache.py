"""Capacity-bounded in-memory cache with optional TTL.

Eviction is by insertion order, not recency: a ``get`` never protects an
entry from eviction. Writing an existing key replaces it and moves it to the
newest position. With a TTL, expired entries read as absent immediately even
if the janitor has not swept them yet.
"""
from __future__ import annotations

import inspect
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Generic, Hashable, Iterator, Optional, TypeVar, Union

from ..logging import get_logger

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """Stored value plus the clock reading at insertion."""

    value: T
    timestamp: float


@dataclass(frozen=True)
class CacheStats:
    name: str
    size: int
    max_size: int
    hits: int
    misses: int

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0


class BoundedCache(Generic[T]):
    """Insertion-ordered cache bounded by ``max_size`` and optional ``ttl_seconds``."""

    def __init__(
        self,
        max_size: int,
        *,
        ttl_seconds: Optional[float] = None,
        name: str = "cache",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self.name = name
        self._clock = clock
        self._entries: Dict[Hashable, CacheEntry[T]] = {}
        self._hits = 0
        self._misses = 0
        self._logger = get_logger("cache")

    def _expired(self, entry: CacheEntry[T], now: Optional[float] = None) -> bool:
        if self.ttl_seconds is None:
            return False
        now = self._clock() if now is None else now
        return now - entry.timestamp > self.ttl_seconds

    def get(self, key: Hashable, default: Optional[T] = None) -> Optional[T]:
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return default
        if self._expired(entry):
            del self._entries[key]
            self._misses += 1
            return default
        self._hits += 1
        return entry.value

    def put(self, key: Hashable, value: T) -> None:
        self._entries.pop(key, None)
        while len(self._entries) >= self.max_size:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            self._logger.debug("cache %s evicted oldest entry %r", self.name, oldest)
        self._entries[key] = CacheEntry(value=value, timestamp=self._clock())

    async def get_or_set(
        self,
        key: Hashable,
        factory: Callable[[], Union[T, Awaitable[T]]],
        *,
        force_fresh: bool = False,
    ) -> T:
        """Return the cached value or build, store and return a fresh one.

        ``force_fresh`` bypasses the lookup (callers use it when the inputs
        behind ``key`` changed). ``None`` results are returned but not stored.
        """
        if not force_fresh:
            entry = self._entries.get(key)
            if entry is not None and not self._expired(entry):
                self._hits += 1
                return entry.value
            self._misses += 1
        value = factory()
        if inspect.isawaitable(value):
            value = await value
        if value is not None:
            self.put(key, value)
        return value

    def delete(self, key: Hashable) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self, pattern: Optional[str] = None) -> int:
        """Remove all entries, or only those whose ``str(key)`` contains ``pattern``."""
        if pattern is None:
            count = len(self._entries)
            self._entries.clear()
            return count
        doomed = [k for k in self._entries if pattern in str(k)]
        for k in doomed:
            del self._entries[k]
        return len(doomed)

    def purge_expired(self) -> int:
        """Drop every entry older than the TTL; no-op without a TTL."""
        if self.ttl_seconds is None:
            return 0
        now = self._clock()
        doomed = [k for k, e in self._entries.items() if self._expired(e, now)]
        for k in doomed:
            del self._entries[k]
        return len(doomed)

    def trim_to_capacity(self) -> int:
        """Evict oldest entries until size is within ``max_size``."""
        removed = 0
        while len(self._entries) > self.max_size:
            del self._entries[next(iter(self._entries))]
            removed += 1
        return removed

    def stats(self) -> CacheStats:
        return CacheStats(
            name=self.name,
            size=len(self._entries),
            max_size=self.max_size,
            hits=self._hits,
            misses=self._misses,
        )

    def keys(self) -> Iterator[Hashable]:
        return iter(list(self._entries))

    def __contains__(self, key: object) -> bool:
        entry = self._entries.get(key)  # type: ignore[arg-type]
        return entry is not None and not self._expired(entry)

    def __len__(self) -> int:
        return len(self._entries)


class TemplateCache(BoundedCache[str]):
    """Assembled instruction text keyed by logical template name; no TTL.

    Callers invalidate with :meth:`clear` when the template sources change.
    """

    def __init__(self, max_size: int = 50, *, clock: Callable[[], float] = time.monotonic) -> None:
        super().__init__(max_size, name="template", clock=clock)


class EphemeralResultCache(BoundedCache[Any]):
    """Short-lived cache of assembled request bodies, scoped per user."""

    def __init__(
        self,
        max_size: int = 25,
        ttl_seconds: float = 300,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(max_size, ttl_seconds=ttl_seconds, name="ephemeral", clock=clock)

    @staticmethod
    def user_key(user_id: str, name: str) -> str:
        return f"{user_id}:{name}"

    def get_for_user(self, user_id: str, name: str) -> Any:
        return self.get(self.user_key(user_id, name))

    def put_for_user(self, user_id: str, name: str, value: Any) -> None:
        self.put(self.user_key(user_id, name), value)


__all__ = ["CacheEntry", "CacheStats", "BoundedCache", "TemplateCache", "EphemeralResultCache"]
