"""Token counting helpers."""

from .counter import DEFAULT_ENCODING, TokenCounter, estimate_tokens

__all__ = ["DEFAULT_ENCODING", "TokenCounter", "estimate_tokens"]
