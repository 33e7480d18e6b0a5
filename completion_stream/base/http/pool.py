"""Bounded pool of reusable provider clients.

Purpose:
    Hold one ``openai.AsyncOpenAI`` client (over a shared ``httpx.AsyncClient``)
    per ``(endpoint, credential)`` pair so repeated completions reuse
    connections instead of paying a TLS handshake per request.

External dependencies:
    - ``openai`` for the OpenAI-compatible chat completions surface.
    - ``httpx`` for the underlying asynchronous transport.

Timeout strategy:
    Transport timeouts come from :func:`get_timeout_config` at client
    construction. The pool itself never blocks on network I/O; clients are
    built lazily on first attribute access so ``get`` cannot fail on malformed
    endpoints. The failure surfaces on first use instead.

Lifecycle & cleanup:
    - Keys are ``(endpoint, fingerprint)``; the fingerprint is a short prefix
      of the key plus a SHA-256 digest, so the secret itself is never stored
      in the key.
    - When the pool grows past ``max_size`` the least recently used client is
      removed and closed. ``close_all`` disposes every client; call it on
      shutdown (``CompletionContext.aclose`` does).
    - The pool is the only cross-request mutable state. Under a single event
      loop no locking is needed: every map mutation happens between awaits.
"""

from __future__ import annotations

import hashlib
import inspect
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import openai

from ..errors import ConfigurationError
from ..logging import LogContext, get_logger, normalized_log_event
from ..timeouts import TimeoutConfig, get_timeout_config

PoolKey = Tuple[str, str]
ClientFactory = Callable[[str, str, TimeoutConfig], Any]

KEY_PREFIX_CHARS = 8
_DIGEST_CHARS = 12


def api_key_fingerprint(api_key: Optional[str]) -> str:
    """Return a short, distinguishing, non-reversible identifier for a key."""
    raw = api_key or ""
    digest = hashlib.sha256(raw.encode("utf-8")).hexdigest()[:_DIGEST_CHARS]
    return f"{raw[:KEY_PREFIX_CHARS]}:{digest}"


def pool_key(endpoint: Optional[str], api_key: Optional[str]) -> PoolKey:
    return (endpoint or "", api_key_fingerprint(api_key))


def default_client_factory(endpoint: str, api_key: str, timeout_config: TimeoutConfig) -> openai.AsyncOpenAI:
    """Build the SDK client used for a pooled entry.

    SDK retries are disabled: retrying is the caller's decision.
    """
    timeout = timeout_config.to_httpx()
    return openai.AsyncOpenAI(
        base_url=endpoint,
        api_key=api_key,
        max_retries=0,
        timeout=timeout,
        http_client=httpx.AsyncClient(timeout=timeout),
    )


class PooledClient:
    """Handle for one pooled provider client.

    The SDK client is created on first access of :attr:`client`. ``last_used``
    is a monotonic timestamp updated by the pool on every hit.
    """

    def __init__(
        self,
        key: PoolKey,
        endpoint: str,
        api_key: str,
        factory: ClientFactory,
        timeout_config: TimeoutConfig,
    ) -> None:
        self.key = key
        self.endpoint = endpoint
        self._api_key = api_key
        self._factory = factory
        self._timeout_config = timeout_config
        self._client: Any = None
        self.closed = False
        self.created_at = time.monotonic()
        self.last_used = self.created_at

    @property
    def client(self) -> Any:
        if self.closed:
            raise ConfigurationError(f"Pooled client for {self.endpoint} was already closed", endpoint=self.endpoint)
        if self._client is None:
            try:
                self._client = self._factory(self.endpoint, self._api_key, self._timeout_config)
            except Exception as exc:  # noqa: BLE001 - surfaced as configuration failure
                raise ConfigurationError(
                    f"Could not build a client for {self.endpoint!r}: {exc}",
                    endpoint=self.endpoint,
                    raw=exc,
                ) from exc
        return self._client

    @property
    def connected(self) -> bool:
        return self._client is not None

    def touch(self) -> None:
        self.last_used = time.monotonic()

    async def close(self) -> None:
        """Dispose the underlying SDK client (idempotent)."""
        if self.closed:
            return
        self.closed = True
        client, self._client = self._client, None
        if client is None:
            return
        result = client.close()
        if inspect.isawaitable(result):
            await result

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"PooledClient(endpoint={self.endpoint!r}, connected={self.connected}, closed={self.closed})"


class ProviderClientPool:
    """Capacity-bounded, least-recently-used pool of :class:`PooledClient`."""

    def __init__(
        self,
        max_size: int = 5,
        *,
        client_factory: Optional[ClientFactory] = None,
        timeout_config: Optional[TimeoutConfig] = None,
        logger=None,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._factory = client_factory or default_client_factory
        self._timeout_config = timeout_config or get_timeout_config()
        self._entries: Dict[PoolKey, PooledClient] = {}
        self._logger = logger or get_logger("pool")

    async def get(self, endpoint: str, api_key: str) -> PooledClient:
        """Return the pooled client for ``(endpoint, api_key)``, creating it if needed."""
        key = pool_key(endpoint, api_key)
        entry = self._entries.get(key)
        if entry is not None and not entry.closed:
            entry.touch()
            return entry

        entry = PooledClient(key, endpoint, api_key, self._factory, self._timeout_config)
        self._entries[key] = entry
        evicted: List[PooledClient] = []
        while len(self._entries) > self.max_size:
            oldest_key = min(self._entries, key=lambda k: self._entries[k].last_used)
            evicted.append(self._entries.pop(oldest_key))
        for old in evicted:
            normalized_log_event(
                self._logger,
                "pool.evict",
                LogContext(endpoint=old.endpoint),
                phase="pool",
                emitted=None,
                pool_size=len(self._entries),
                max_size=self.max_size,
            )
            await self._close_quietly(old, "pool.evict_close_failed")
        return entry

    async def close_all(self) -> int:
        """Close and remove every pooled client; return how many were removed.

        A client whose ``close()`` fails is logged and skipped; the rest are
        still closed.
        """
        entries = list(self._entries.values())
        self._entries.clear()
        for entry in entries:
            await self._close_quietly(entry, "pool.close_failed")
        return len(entries)

    async def _close_quietly(self, entry: PooledClient, event: str) -> bool:
        try:
            await entry.close()
        except Exception as exc:  # noqa: BLE001 - logged and skipped
            normalized_log_event(
                self._logger,
                event,
                LogContext(endpoint=entry.endpoint),
                phase="pool",
                emitted=None,
                level=logging.WARNING,
                error_type=type(exc).__name__,
                error=str(exc)[:200],
            )
            return False
        return True

    def keys(self) -> List[PoolKey]:
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


__all__ = [
    "PooledClient",
    "ProviderClientPool",
    "PoolKey",
    "api_key_fingerprint",
    "pool_key",
    "default_client_factory",
]
