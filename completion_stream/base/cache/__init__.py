"""In-memory caches used around prompt assembly.

``TemplateCache`` holds assembled instruction text (no TTL);
``EphemeralResultCache`` holds recently built request bodies for a short TTL.
"""

from .bounded_cache import BoundedCache, CacheEntry, CacheStats, EphemeralResultCache, TemplateCache

__all__ = ["BoundedCache", "CacheEntry", "CacheStats", "EphemeralResultCache", "TemplateCache"]
