"""Caller-side retry for completion calls.

The engine never retries: ``complete`` returns failures as results. Callers
that want another attempt wrap the call in :func:`retry_completion`, which
re-invokes it while the returned error carries a retryable code.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Optional, Protocol

from ..errors import CompletionError, ErrorCode
from ..models import CompletionResult


class AttemptLogger(Protocol):  # pragma: no cover - structural protocol
    def __call__(
        self,
        *,
        attempt: int,
        max_attempts: int,
        delay: float | None,
        error: CompletionError | None,
    ) -> None: ...


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 3
    delay_base: float = 2.0  # exponential base (base**attempt seconds)
    retryable_codes: tuple[ErrorCode, ...] = (
        ErrorCode.TRANSIENT,
        ErrorCode.RATE_LIMIT,
        ErrorCode.UNAVAILABLE,
        ErrorCode.TIMEOUT,
    )
    attempt_logger: AttemptLogger | None = None

    def delays(self) -> Iterable[float]:
        for attempt in range(self.max_attempts - 1):
            yield self.delay_base**attempt


DEFAULT_RETRY_CONFIG = RetryConfig()


async def retry_completion(
    call: Callable[[], Awaitable[CompletionResult]],
    config: RetryConfig = DEFAULT_RETRY_CONFIG,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> CompletionResult:
    """Invoke ``call`` until it succeeds, fails non-retryably, or attempts run out.

    Returns the last result; exceptions raised by ``call`` propagate.
    """
    delays = list(config.delays()) + [None]  # final attempt has no delay
    result: Optional[CompletionResult] = None
    for attempt, delay in enumerate(delays):
        result = await call()
        error = result.error
        retrying = error is not None and error.code in config.retryable_codes and delay is not None
        if config.attempt_logger:
            config.attempt_logger(
                attempt=attempt,
                max_attempts=config.max_attempts,
                delay=delay if retrying else None,
                error=error,
            )
        if not retrying:
            return result
        await sleep(delay)
    assert result is not None  # nosec B101 - max_attempts >= 1
    return result


__all__ = ["AttemptLogger", "RetryConfig", "DEFAULT_RETRY_CONFIG", "retry_completion"]
