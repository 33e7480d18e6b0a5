from __future__ import annotations

import pytest

from completion_stream.base.streaming import TRUNCATION_NOTICE, ChannelBuffer, StreamState, compute_metrics


def test_buffer_accepts_up_to_ceiling():
    buf = ChannelBuffer("content", 10)
    assert buf.append("12345") is True  # nosec B101
    assert buf.append("67890") is True  # nosec B101
    assert buf.truncated is False  # nosec B101
    assert buf.text == "1234567890"  # nosec B101


def test_buffer_clips_on_breach_and_refuses_more():
    buf = ChannelBuffer("content", 8)
    buf.append("12345")
    assert buf.append("67890") is False  # nosec B101
    assert buf.length == 8  # nosec B101
    assert buf.text == "12345678" + TRUNCATION_NOTICE  # nosec B101
    assert buf.append("more") is False  # nosec B101
    assert buf.text.count(TRUNCATION_NOTICE) == 1  # nosec B101
    assert buf.generated == "12345678"  # nosec B101


def test_buffer_rejects_non_positive_ceiling():
    with pytest.raises(ValueError):
        ChannelBuffer("content", 0)


def test_metrics_without_first_token():
    state = StreamState(content=ChannelBuffer("content", 5), reasoning=ChannelBuffer("reasoning", 5), start_time=1.0)
    metrics = compute_metrics(state, 1.5, None)
    assert metrics.total_duration_ms == 500.0  # nosec B101
    assert metrics.time_to_first_token_ms is None  # nosec B101
    assert metrics.tokens_per_second is None  # nosec B101


def test_metrics_use_backend_window():
    state = StreamState(
        content=ChannelBuffer("content", 5),
        reasoning=ChannelBuffer("reasoning", 5),
        start_time=0.0,
        first_token_at=2.0,
    )
    metrics = compute_metrics(state, 6.0, 20)
    assert metrics.time_to_first_token_ms == 2000.0  # nosec B101
    assert metrics.tokens_per_second == 5.0  # nosec B101
