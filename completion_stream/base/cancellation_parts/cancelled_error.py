"""Cancellation error type.

Raised by :meth:`CancellationToken.raise_if_cancelled`. The engine converts it
into a ``StreamCancelledError`` on the result, so it never escapes ``complete``.
"""

from __future__ import annotations


class CancelledError(RuntimeError):
    """Raised when an operation is cancelled cooperatively."""


__all__ = ["CancelledError"]
