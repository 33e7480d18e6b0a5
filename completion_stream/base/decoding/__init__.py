"""Pure decoders turning accumulated stream text into a result."""

from .reasoning import DEFAULT_REASONING_TAGS, ReasoningSplit, ReasoningTags, split_reasoning
from .structured import (
    FALLBACK_RESPONSE,
    StructuredDecode,
    clean_json_markers,
    decode_structured,
)

__all__ = [
    "DEFAULT_REASONING_TAGS",
    "ReasoningSplit",
    "ReasoningTags",
    "split_reasoning",
    "FALLBACK_RESPONSE",
    "StructuredDecode",
    "clean_json_markers",
    "decode_structured",
]
