"""Streaming timing metrics derived from a finished :class:`StreamState`."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .stream_state import StreamState


@dataclass
class StreamMetrics:
    """Collected timing for a single streamed completion.

    ``time_to_first_token_ms`` is measured from request start. Throughput uses
    the backend window only (first token to end), so queueing and prompt
    processing time do not dilute it.
    """

    emitted: int = 0
    time_to_first_token_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None
    output_tokens: Optional[int] = None
    tokens_per_second: Optional[float] = None


def compute_metrics(state: StreamState, end_time: float, output_tokens: Optional[int]) -> StreamMetrics:
    metrics = StreamMetrics(
        emitted=state.chunks,
        total_duration_ms=round((end_time - state.start_time) * 1000, 3),
        output_tokens=output_tokens,
    )
    if state.first_token_at is None:
        return metrics
    metrics.time_to_first_token_ms = round((state.first_token_at - state.start_time) * 1000, 3)
    window = end_time - state.first_token_at
    if output_tokens is not None:
        metrics.tokens_per_second = round(output_tokens / window, 2) if window > 0 else float(output_tokens)
    return metrics


__all__ = ["StreamMetrics", "compute_metrics"]
