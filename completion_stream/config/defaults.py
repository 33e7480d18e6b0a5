"""Built-in defaults for every dot-path the completion client reads.

Keys mirror the external configuration layout (``pool.maxSize``,
``stream.ceilings.chat`` ...). Anything absent from the external config falls
back to these values.
"""
from __future__ import annotations

from typing import Any, Dict

POOL_MAX_SIZE = 5
TEMPLATE_CACHE_MAX_SIZE = 50
EPHEMERAL_CACHE_MAX_SIZE = 25
EPHEMERAL_CACHE_TTL_SECONDS = 300
JANITOR_INTERVAL_SECONDS = 300

CHAT_CEILING = 75_000
TOOL_CEILING = 50_000
SUMMARY_CEILING = 25_000
REASONING_CEILING = 75_000

DIAGNOSTIC_PREFIX_CHARS = 200
STRUCTURED_FIELD = "final_response"
TOKEN_ENCODING = "cl100k_base"

# null placeholders let env overrides resolve camelCase leaf names
_MODEL_KEYS: Dict[str, Any] = {"endpoint": None, "apiKey": None, "model": None, "modelType": None, "maxTokens": None}

DEFAULTS: Dict[str, Any] = {
    "pool": {"maxSize": POOL_MAX_SIZE},
    "cache": {
        "template": {"maxSize": TEMPLATE_CACHE_MAX_SIZE},
        "ephemeral": {
            "maxSize": EPHEMERAL_CACHE_MAX_SIZE,
            "ttlSeconds": EPHEMERAL_CACHE_TTL_SECONDS,
        },
    },
    "janitor": {"intervalSeconds": JANITOR_INTERVAL_SECONDS},
    "stream": {
        "ceilings": {
            "chat": CHAT_CEILING,
            "tool": TOOL_CEILING,
            "summary": SUMMARY_CEILING,
            "reasoning": REASONING_CEILING,
        }
    },
    "decoder": {
        "diagnosticPrefixChars": DIAGNOSTIC_PREFIX_CHARS,
        "structuredField": STRUCTURED_FIELD,
    },
    "tokens": {"encoding": TOKEN_ENCODING},
    "models": {
        "chat": dict(_MODEL_KEYS),
        "tool": dict(_MODEL_KEYS),
        "summary": dict(_MODEL_KEYS),
    },
    "samplers": {
        "chat": {},
        "tool": {"temperature": 0.5},
    },
}

__all__ = [
    "DEFAULTS",
    "POOL_MAX_SIZE",
    "TEMPLATE_CACHE_MAX_SIZE",
    "EPHEMERAL_CACHE_MAX_SIZE",
    "EPHEMERAL_CACHE_TTL_SECONDS",
    "JANITOR_INTERVAL_SECONDS",
    "CHAT_CEILING",
    "TOOL_CEILING",
    "SUMMARY_CEILING",
    "REASONING_CEILING",
    "DIAGNOSTIC_PREFIX_CHARS",
    "STRUCTURED_FIELD",
    "TOKEN_ENCODING",
]
