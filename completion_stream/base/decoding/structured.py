"""Structured (JSON) output recovery for tool / chain-of-thought completions.

Models asked for JSON frequently wrap it in Markdown fences, leave trailing
commas, or get cut off mid-string when a ceiling truncates the stream.
:func:`decode_structured` escalates through four stages and reports which one
succeeded:

1. ``strict``: ``json.loads`` on the fence-stripped text.
2. ``repaired``: ``json_repair.repair_json`` (trailing commas, unquoted keys,
   truncated strings and containers) followed by ``json.loads``.
3. ``emergency``: regex extraction of the ``"final_response"`` string value,
   wrapped in a minimal object with one diagnostic thought.
4. Otherwise :class:`DecodeError` carrying a bounded prefix of the input.

No I/O; the function is pure.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Optional

from json_repair import repair_json

from ..errors import DecodeError

FALLBACK_RESPONSE = "Sorry, I lost my train of thought there. Could you ask me that again?"
EMERGENCY_THOUGHT = "Structured output was malformed; final_response recovered by pattern extraction."

STRATEGY_STRICT = "strict"
STRATEGY_REPAIRED = "repaired"
STRATEGY_EMERGENCY = "emergency"


@dataclass(frozen=True)
class StructuredDecode:
    data: Any
    strategy: str
    field: str = "final_response"

    @property
    def final_response(self) -> Optional[str]:
        """String value of ``field`` when the payload is an object."""
        if isinstance(self.data, dict):
            value = self.data.get(self.field)
            return value if isinstance(value, str) else None
        return None


def clean_json_markers(s: str) -> str:
    """Strip common Markdown code fences from LLM JSON replies.

    Parameters:
        s: Raw string potentially wrapped in triple backtick fences
           (```json ... ``` or ``` ... ```).

    Returns:
        The input string with leading/trailing code fences removed and
        surrounding whitespace trimmed.
    """
    s = s.strip()
    if s.startswith("```json"):
        s = s[7:]
    elif s.startswith("```"):
        s = s[3:]
    if s.endswith("```"):
        s = s[:-3]
    return s.strip()


def _strict(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return None


def _repaired(text: str) -> Optional[Any]:
    try:
        repaired = repair_json(text)
    except Exception:  # noqa: BLE001 - the fixer is best effort
        return None
    if not isinstance(repaired, str) or not repaired.strip():
        return None
    data = _strict(repaired)
    # repair_json yields "" / "null" / bare scalars for text with no JSON in it
    if isinstance(data, (dict, list)) and data:
        return data
    return None


def _emergency(text: str, field: str) -> Optional[dict]:
    pattern = re.compile(r'"' + re.escape(field) + r'"\s*:\s*"((?:[^"\\]|\\.)*)', re.DOTALL)
    match = pattern.search(text)
    if match is None:
        return None
    raw_value = match.group(1)
    try:
        value = json.loads(f'"{raw_value}"')
    except (json.JSONDecodeError, ValueError):
        value = raw_value
    value = value.strip() or FALLBACK_RESPONSE
    return {field: value, "thoughts": [{"step": 1, "thought": EMERGENCY_THOUGHT}]}


def decode_structured(
    text: str,
    *,
    field: str = "final_response",
    prefix_limit: int = 200,
) -> StructuredDecode:
    """Recover a JSON value from model output.

    Raises:
        DecodeError: when no stage yields a value; ``raw_prefix`` holds at
            most ``prefix_limit`` characters of ``text``.
    """
    cleaned = clean_json_markers(text or "")
    if cleaned:
        data = _strict(cleaned)
        if data is not None:
            return StructuredDecode(data=data, strategy=STRATEGY_STRICT, field=field)
        data = _repaired(cleaned)
        if data is not None:
            return StructuredDecode(data=data, strategy=STRATEGY_REPAIRED, field=field)
        data = _emergency(cleaned, field)
        if data is not None:
            return StructuredDecode(data=data, strategy=STRATEGY_EMERGENCY, field=field)
    raise DecodeError(
        "Structured output could not be decoded after repair attempts",
        raw_prefix=(text or "")[:prefix_limit],
    )


__all__ = [
    "StructuredDecode",
    "decode_structured",
    "clean_json_markers",
    "FALLBACK_RESPONSE",
    "STRATEGY_STRICT",
    "STRATEGY_REPAIRED",
    "STRATEGY_EMERGENCY",
]
