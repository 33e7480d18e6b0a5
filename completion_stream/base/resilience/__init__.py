"""Resilience helpers (caller-side retry)."""

from .retry import DEFAULT_RETRY_CONFIG, RetryConfig, retry_completion

__all__ = ["DEFAULT_RETRY_CONFIG", "RetryConfig", "retry_completion"]
