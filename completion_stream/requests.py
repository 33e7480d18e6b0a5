"""Request body builders for chat and tool completions.

Purpose
-------
Assemble OpenAI-compatible request bodies from prompt text, the user message
and the ``samplers.<kind>.*`` configuration block.

External dependencies
---------------------
- Pydantic v2 ``BaseModel`` validates the message list and carries sampler
  fields as extras; ``to_body()`` dumps a plain dict with unset values
  omitted.

Notes
-----
- Sampler keys are configured in camelCase (``topK``, ``repetitionPenalty``)
  and sent in snake_case (``top_k``, ``repetition_penalty``). Values read
  from env or text config arrive as strings and are coerced.
- Backend-specific samplers (``min_p``, ``top_k``, ``xtc_threshold``...) end
  up in ``extra_body`` when the engine calls the SDK.
"""
from __future__ import annotations

import re
from typing import Any, Callable, Dict, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict

ACKNOWLEDGEMENT = (
    "I understand. I'll keep the provided rules, character information, and given "
    "context in mind when responding to the next user message."
)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant", "tool"]
    content: str


class RequestBody(BaseModel):
    """Chat completion body; sampler parameters are stored as extra fields."""

    model_config = ConfigDict(extra="allow")

    model: Optional[str] = None
    messages: List[ChatMessage]

    def to_body(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


def sampler_key(name: str) -> str:
    """``repetitionPenalty`` -> ``repetition_penalty``."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def _coerce(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    text = value.strip()
    if text == "":
        return None
    lowered = text.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    for cast in (int, float):
        try:
            return cast(text)
        except ValueError:
            continue
    return text


def load_samplers(get_config: Callable[[str], Any], kind: str) -> Dict[str, Any]:
    """Read ``samplers.<kind>`` and return snake_case keys with unset values dropped."""
    raw = get_config(f"samplers.{kind}") or {}
    if not isinstance(raw, Mapping):
        return {}
    out: Dict[str, Any] = {}
    for key, value in raw.items():
        coerced = _coerce(value)
        if coerced is not None:
            out[sampler_key(str(key))] = coerced
    return out


def build_chat_request_body(
    prompt: str,
    message: str,
    get_config: Callable[[str], Any],
    *,
    context: Optional[str] = None,
    user: str = "",
) -> Dict[str, Any]:
    """Build a chat body: system prompt, optional context, acknowledgement, user turn."""
    user_turn = f"{user} sends the following message: {message}" if user else message
    messages = [ChatMessage(role="system", content=prompt)]
    if context:
        messages.append(ChatMessage(role="user", content=context))
    messages.append(ChatMessage(role="assistant", content=ACKNOWLEDGEMENT))
    messages.append(ChatMessage(role="user", content=user_turn))
    body = RequestBody(
        model=get_config("models.chat.model"),
        messages=messages,
        **load_samplers(get_config, "chat"),
    )
    return body.to_body()


def build_tool_request_body(
    prompt: str,
    model: Optional[str],
    message: str,
    get_config: Callable[[str], Any],
) -> Dict[str, Any]:
    """Build a two-turn tool body (system prompt, user message)."""
    body = RequestBody(
        model=model,
        messages=[
            ChatMessage(role="system", content=prompt),
            ChatMessage(role="user", content=message),
        ],
        **load_samplers(get_config, "tool"),
    )
    return body.to_body()


__all__ = [
    "ACKNOWLEDGEMENT",
    "ChatMessage",
    "RequestBody",
    "build_chat_request_body",
    "build_tool_request_body",
    "load_samplers",
    "sampler_key",
]
