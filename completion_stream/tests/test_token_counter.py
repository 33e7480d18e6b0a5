from __future__ import annotations

import pytest

from completion_stream.base.tokens import TokenCounter, estimate_tokens
from completion_stream.tests.fakes import WordTokenCounter


class _BrokenCounter(TokenCounter):
    def count_sync(self, text, model_type=None):
        raise RuntimeError("tokenizer unavailable")


def test_estimate_is_ceil_of_quarter_length():
    assert estimate_tokens("") == 0  # nosec B101
    assert estimate_tokens("abc") == 1  # nosec B101
    assert estimate_tokens("a" * 9) == 3  # nosec B101


@pytest.mark.asyncio
async def test_count_falls_back_on_tokenizer_failure():
    assert await _BrokenCounter().count("a" * 10) == 3  # nosec B101


@pytest.mark.asyncio
async def test_count_empty_short_circuits():
    assert await _BrokenCounter().count("") == 0  # nosec B101


@pytest.mark.asyncio
async def test_count_messages_adds_overhead():
    counter = WordTokenCounter()
    messages = [
        {"role": "system", "content": "be brief"},
        {"role": "user", "content": [{"type": "text", "text": "one two three"}]},
        {"role": "assistant"},
    ]
    # (4 + 2) + (4 + 3) + priming 3
    assert await counter.count_messages(messages) == 16  # nosec B101
    assert await counter.count_messages([]) == 0  # nosec B101


def test_unknown_model_type_uses_configured_encoding(monkeypatch):
    calls = []

    def fake_for_model(name):
        raise KeyError(name)

    def fake_get(name):
        calls.append(name)
        return type("Enc", (), {"encode": lambda self, text, disallowed_special=(): text.split()})()

    monkeypatch.setattr("completion_stream.base.tokens.counter.tiktoken.encoding_for_model", fake_for_model)
    monkeypatch.setattr("completion_stream.base.tokens.counter.tiktoken.get_encoding", fake_get)
    counter = TokenCounter("o200k_base")
    assert counter.count_sync("a b c", "qwen2") == 3  # nosec B101
    assert counter.count_sync("d e", "qwen2") == 2  # nosec B101
    assert calls == ["o200k_base"]  # nosec B101
