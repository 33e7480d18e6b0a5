"""Streaming completion engine package."""

from .engine import DEFAULT_CEILINGS, StreamingCompletionEngine
from .stream_state import TRUNCATION_NOTICE, ChannelBuffer, StreamState
from .streaming_metrics import StreamMetrics, compute_metrics

__all__ = [
    "StreamingCompletionEngine",
    "DEFAULT_CEILINGS",
    "TRUNCATION_NOTICE",
    "ChannelBuffer",
    "StreamState",
    "StreamMetrics",
    "compute_metrics",
]
