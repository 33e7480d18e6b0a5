"""Cooperative cancellation primitives (public API facade).

A caller hands a :class:`CancellationToken` to ``complete``; the engine polls
it before each chunk and aborts the stream once it is cancelled.
"""

from .cancellation_parts.cancelled_error import CancelledError
from .cancellation_parts.cancellation_token import CancellationToken

__all__ = ["CancellationToken", "CancelledError"]
