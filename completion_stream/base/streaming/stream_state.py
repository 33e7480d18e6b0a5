"""Per-request accumulation state for one streamed completion.

A :class:`StreamState` is created by the engine for a single request and
dropped when ``complete`` returns. It is never shared between requests.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

TRUNCATION_NOTICE = "\n\n[Response truncated: output exceeded the configured size limit]"


class ChannelBuffer:
    """Append-only text buffer that refuses to grow past ``ceiling`` characters."""

    def __init__(self, name: str, ceiling: int) -> None:
        if ceiling < 1:
            raise ValueError("ceiling must be at least 1")
        self.name = name
        self.ceiling = ceiling
        self._parts: List[str] = []
        self._length = 0
        self.truncated = False

    def append(self, fragment: str) -> bool:
        """Add ``fragment``; return ``False`` once the ceiling is reached.

        On breach the fragment is clipped so the buffer holds exactly
        ``ceiling`` characters, then the truncation notice is appended.
        """
        if self.truncated:
            return False
        room = self.ceiling - self._length
        if len(fragment) <= room:
            self._parts.append(fragment)
            self._length += len(fragment)
            return True
        if room > 0:
            self._parts.append(fragment[:room])
            self._length += room
        self._parts.append(TRUNCATION_NOTICE)
        self.truncated = True
        return False

    @property
    def length(self) -> int:
        """Accumulated characters, excluding any truncation notice."""
        return self._length

    @property
    def text(self) -> str:
        return "".join(self._parts)

    @property
    def generated(self) -> str:
        """Text the provider actually produced (no truncation notice)."""
        parts = self._parts[:-1] if self.truncated else self._parts
        return "".join(parts)

    def release(self) -> None:
        self._parts.clear()

    def __bool__(self) -> bool:
        return self._length > 0


@dataclass
class StreamState:
    content: ChannelBuffer
    reasoning: ChannelBuffer
    start_time: float
    first_token_at: Optional[float] = None
    end_time: Optional[float] = None
    chunks: int = 0
    truncated_channels: List[str] = field(default_factory=list)

    @property
    def truncated(self) -> bool:
        return bool(self.truncated_channels)

    @property
    def empty(self) -> bool:
        return not self.content and not self.reasoning

    def release(self) -> None:
        self.content.release()
        self.reasoning.release()


__all__ = ["ChannelBuffer", "StreamState", "TRUNCATION_NOTICE"]
