"""Cooperative cancellation token for streaming completions.

The engine polls :attr:`CancellationToken.cancelled` between chunks. Callers
that want to wait on cancellation (for example a watchdog task racing the
stream) can ``await token.wait()``.
"""

from __future__ import annotations

import asyncio
from typing import List, Optional

from .cancelled_error import CancelledError
from .state import State


class CancellationToken:
    """A cooperative cancellation token; child tokens inherit cancellation."""

    def __init__(self, *, parent: Optional["CancellationToken"] = None) -> None:
        self._state = State()
        self._event: Optional[asyncio.Event] = None
        self._children: List[CancellationToken] = []
        if parent is not None:
            parent.link_child(self)

    @property
    def cancelled(self) -> bool:
        return self._state.cancelled

    @property
    def reason(self) -> Optional[str]:
        return self._state.reason

    def cancel(self, reason: Optional[str] = None) -> None:
        """Request cancellation and cascade to children (idempotent)."""
        if self._state.cancelled:
            return
        self._state.cancelled = True
        self._state.reason = reason
        if self._event is not None:
            self._event.set()
        for child in list(self._children):
            child.cancel(reason)

    def link_child(self, token: "CancellationToken") -> "CancellationToken":
        self._children.append(token)
        if self._state.cancelled:
            token.cancel(self._state.reason)
        return token

    def child(self) -> "CancellationToken":
        return CancellationToken(parent=self)

    def raise_if_cancelled(self) -> None:
        if self._state.cancelled:
            raise CancelledError(self._state.reason or "operation cancelled")

    async def wait(self) -> Optional[str]:
        """Block until cancelled; return the reason."""
        if self._event is None:
            self._event = asyncio.Event()
            if self._state.cancelled:
                self._event.set()
        await self._event.wait()
        return self._state.reason

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"CancellationToken(cancelled={self._state.cancelled}, reason={self._state.reason!r})"


__all__ = ["CancellationToken"]
