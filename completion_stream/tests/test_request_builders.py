from __future__ import annotations

import pytest
from pydantic import ValidationError

from completion_stream.config import Settings
from completion_stream.requests import (
    ACKNOWLEDGEMENT,
    ChatMessage,
    build_chat_request_body,
    build_tool_request_body,
    load_samplers,
    sampler_key,
)


def _settings(**samplers):
    return Settings({"models": {"chat": {"model": "chat-model"}}, "samplers": samplers}, environ={})


def test_chat_body_turn_order_and_user_prefix():
    body = build_chat_request_body("rules", "hi there", _settings(), context="ctx", user="alice")
    roles = [m["role"] for m in body["messages"]]
    assert roles == ["system", "user", "assistant", "user"]  # nosec B101
    assert body["messages"][1]["content"] == "ctx"  # nosec B101
    assert body["messages"][2]["content"] == ACKNOWLEDGEMENT  # nosec B101
    assert body["messages"][3]["content"] == "alice sends the following message: hi there"  # nosec B101
    assert body["model"] == "chat-model"  # nosec B101


def test_chat_body_without_context_or_user():
    body = build_chat_request_body("rules", "hi", _settings())
    assert [m["role"] for m in body["messages"]] == ["system", "assistant", "user"]  # nosec B101
    assert body["messages"][-1]["content"] == "hi"  # nosec B101


def test_chat_samplers_are_snake_cased_and_coerced():
    settings = _settings(chat={"topK": "40", "minP": "0.05", "tokenHealing": "true", "typicalP": "", "maxTokens": 300})
    body = build_chat_request_body("rules", "hi", settings)
    assert body["top_k"] == 40 and body["min_p"] == 0.05  # nosec B101
    assert body["token_healing"] is True and body["max_tokens"] == 300  # nosec B101
    assert "typical_p" not in body  # nosec B101


def test_tool_body_uses_tool_samplers_default_temperature():
    body = build_tool_request_body("extract", "tool-model", "the text", Settings(environ={}))
    assert body["model"] == "tool-model"  # nosec B101
    assert body["temperature"] == 0.5  # nosec B101
    assert [m["role"] for m in body["messages"]] == ["system", "user"]  # nosec B101


def test_sampler_key_and_empty_block():
    assert sampler_key("repetitionPenalty") == "repetition_penalty"  # nosec B101
    assert sampler_key("temperature") == "temperature"  # nosec B101
    assert load_samplers(lambda path: None, "chat") == {}  # nosec B101


def test_message_role_is_validated():
    with pytest.raises(ValidationError):
        ChatMessage(role="narrator", content="x")
