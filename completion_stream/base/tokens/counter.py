"""Output token estimation for throughput metrics.

:class:`TokenCounter` resolves a tiktoken encoding from the model type (or a
configured encoding name) and counts tokens off the event loop. Encoding files
may need to be fetched on first use; any failure at any step falls back to the
character heuristic ``ceil(len(text) / 4)``.
"""

from __future__ import annotations

import asyncio
import math
from typing import Any, Dict, Iterable, Mapping, Optional

import tiktoken

from ..logging import get_logger

DEFAULT_ENCODING = "cl100k_base"
CHARS_PER_TOKEN = 4
# role/format overhead per chat message
MESSAGE_OVERHEAD_TOKENS = 4


def estimate_tokens(text: str) -> int:
    """Character heuristic used whenever a tokenizer is unavailable."""
    return math.ceil(len(text) / CHARS_PER_TOKEN) if text else 0


class TokenCounter:
    """Tiktoken-backed token counting with a character-based fallback."""

    def __init__(self, encoding_name: str = DEFAULT_ENCODING) -> None:
        self.encoding_name = encoding_name
        self._encodings: Dict[str, Any] = {}
        self._logger = get_logger("tokens")

    def _encoding_for(self, model_type: Optional[str]):
        cache_key = model_type or self.encoding_name
        if cache_key in self._encodings:
            return self._encodings[cache_key]
        encoding = None
        if model_type:
            try:
                encoding = tiktoken.encoding_for_model(model_type)
            except KeyError:
                encoding = None
        if encoding is None:
            encoding = tiktoken.get_encoding(self.encoding_name)
        self._encodings[cache_key] = encoding
        return encoding

    def count_sync(self, text: str, model_type: Optional[str] = None) -> int:
        """Count tokens in ``text``; raises if the tokenizer cannot be loaded."""
        if not text:
            return 0
        return len(self._encoding_for(model_type).encode(text, disallowed_special=()))

    async def count(self, text: str, model_type: Optional[str] = None) -> int:
        """Count tokens without blocking the loop, falling back to the heuristic."""
        if not text:
            return 0
        try:
            return await asyncio.to_thread(self.count_sync, text, model_type)
        except Exception as exc:  # noqa: BLE001 - fallback is the documented behavior
            self._logger.debug("token count fell back to heuristic: %s", exc)
            return estimate_tokens(text)

    async def count_messages(self, messages: Iterable[Mapping[str, Any]], model_type: Optional[str] = None) -> int:
        """Estimate prompt tokens for an OpenAI-style message list."""
        total = 0
        for msg in messages:
            content = msg.get("content")
            if isinstance(content, str):
                total += MESSAGE_OVERHEAD_TOKENS + await self.count(content, model_type)
            elif isinstance(content, list):
                total += MESSAGE_OVERHEAD_TOKENS
                for part in content:
                    if isinstance(part, Mapping) and isinstance(part.get("text"), str):
                        total += await self.count(part["text"], model_type)
        return total + 3 if total else 0


__all__ = ["TokenCounter", "estimate_tokens", "DEFAULT_ENCODING"]
