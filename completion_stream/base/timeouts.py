"""Transport timeout configuration for pooled provider clients.

The streaming engine never imposes its own deadlines; stalls at stream open or
between chunks are bounded only by the transport. This module centralizes
those transport values so every pooled client is built the same way.

Key Components
--------------
TimeoutConfig
    Dataclass capturing normalized timeout values in seconds.

get_timeout_config()
    Returns a process-cached configuration, parsing environment overrides on
    first use (and again whenever the override variables change). Supported
    environment variables (all optional):
        CT_TIMEOUT_CONNECT_SECONDS
        CT_TIMEOUT_READ_SECONDS
        CT_TIMEOUT_WRITE_SECONDS
        CT_TIMEOUT_POOL_SECONDS
"""
from __future__ import annotations

import os
from dataclasses import dataclass

import httpx

_ENV_NAMES = (
    "CT_TIMEOUT_CONNECT_SECONDS",
    "CT_TIMEOUT_READ_SECONDS",
    "CT_TIMEOUT_WRITE_SECONDS",
    "CT_TIMEOUT_POOL_SECONDS",
)


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized transport timeout values (seconds).

    Attributes:
        connect_seconds: Establishing the TCP/TLS connection.
        read_seconds: Idle wait for the next bytes, i.e. the next stream chunk.
        write_seconds: Sending the request body.
        pool_seconds: Waiting for a free connection in the httpx pool.
    """

    connect_seconds: float = 10.0
    read_seconds: float = 120.0
    write_seconds: float = 30.0
    pool_seconds: float = 10.0

    def to_httpx(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self.connect_seconds,
            read=self.read_seconds,
            write=self.write_seconds,
            pool=self.pool_seconds,
        )


_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None


def _parse_env_float(name: str, default: float) -> float:
    """Parse a positive float from the environment, else return ``default``."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached :class:`TimeoutConfig`."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - documented module cache
    guard = "/".join(os.getenv(n, "") for n in _ENV_NAMES)
    if _CACHED is not None and _ENV_GUARD == guard:
        return _CACHED
    defaults = TimeoutConfig()
    _CACHED = TimeoutConfig(
        connect_seconds=_parse_env_float("CT_TIMEOUT_CONNECT_SECONDS", defaults.connect_seconds),
        read_seconds=_parse_env_float("CT_TIMEOUT_READ_SECONDS", defaults.read_seconds),
        write_seconds=_parse_env_float("CT_TIMEOUT_WRITE_SECONDS", defaults.write_seconds),
        pool_seconds=_parse_env_float("CT_TIMEOUT_POOL_SECONDS", defaults.pool_seconds),
    )
    _ENV_GUARD = guard
    return _CACHED


__all__ = ["TimeoutConfig", "get_timeout_config"]
