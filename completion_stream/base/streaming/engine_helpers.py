"""Helpers for the streaming completion engine.

Kept separate from the orchestration loop: request id generation, request
validation, SDK parameter assembly, chunk field extraction and stream
disposal.
"""
from __future__ import annotations

import inspect
import secrets
import time
from contextlib import suppress
from typing import Any, Collection, Dict, Mapping, Optional, Tuple

from ..errors import RequestError
from ..models import ProviderConfig

# Keyword arguments accepted by ``chat.completions.create``; anything else in
# the body is forwarded through ``extra_body`` (min_p, top_k, repetition_penalty...).
SDK_PARAMS = frozenset(
    {
        "messages",
        "model",
        "frequency_penalty",
        "logit_bias",
        "logprobs",
        "max_tokens",
        "max_completion_tokens",
        "n",
        "presence_penalty",
        "response_format",
        "seed",
        "stop",
        "stream_options",
        "temperature",
        "tool_choice",
        "tools",
        "top_logprobs",
        "top_p",
        "user",
    }
)


def new_request_id(in_flight: Collection[str]) -> str:
    """Return ``"<epoch-ms>-<8 hex>"`` not currently in ``in_flight``."""
    while True:
        rid = f"{int(time.time() * 1000)}-{secrets.token_hex(4)}"
        if rid not in in_flight:
            return rid


def has_message_content(body: Mapping[str, Any]) -> bool:
    messages = body.get("messages")
    if not isinstance(messages, list):
        return False
    for msg in messages:
        if not isinstance(msg, Mapping):
            continue
        content = msg.get("content")
        if isinstance(content, str) and content.strip():
            return True
        if isinstance(content, list) and content:
            return True
    return False


def validate_body(body: Any, request_id: str) -> Mapping[str, Any]:
    if not isinstance(body, Mapping):
        raise RequestError("Request body must be a mapping", request_id=request_id)
    if not has_message_content(body):
        raise RequestError("Request body has no message with content", request_id=request_id)
    return body


def build_create_params(body: Mapping[str, Any], config: ProviderConfig) -> Dict[str, Any]:
    """Split ``body`` into SDK keyword arguments and an ``extra_body`` mapping."""
    params: Dict[str, Any] = {}
    extra: Dict[str, Any] = {}
    for key, value in body.items():
        if key == "stream" or value is None:
            continue
        if key in SDK_PARAMS:
            params[key] = value
        else:
            extra[key] = value
    params.setdefault("model", config.model)
    if config.max_tokens is not None and "max_tokens" not in params and "max_completion_tokens" not in params:
        params["max_tokens"] = config.max_tokens
    if extra:
        params["extra_body"] = extra
    params["stream"] = True
    return params


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def extract_delta(chunk: Any) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(content, reasoning_content)`` from ``choices[0].delta``."""
    choices = _field(chunk, "choices")
    if not choices:
        return None, None
    delta = _field(choices[0], "delta")
    if delta is None:
        return None, None
    content = _field(delta, "content")
    reasoning = _field(delta, "reasoning_content")
    return (
        content if isinstance(content, str) else None,
        reasoning if isinstance(reasoning, str) else None,
    )


async def close_stream(stream: Any, logger) -> None:
    """Close ``stream`` whether its ``close`` is sync or a coroutine."""
    if stream is None:
        return
    closer = getattr(stream, "close", None) or getattr(stream, "aclose", None)
    if closer is None:
        return
    try:
        result = closer()
        if inspect.isawaitable(result):
            await result
    except Exception as exc:  # noqa: BLE001 - close failures must not mask the result
        with suppress(Exception):
            logger.debug("stream close failed: %s", exc)


__all__ = [
    "SDK_PARAMS",
    "new_request_id",
    "has_message_content",
    "validate_body",
    "build_create_params",
    "extract_delta",
    "close_stream",
]
