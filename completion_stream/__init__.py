"""completion_stream package

Streaming completion client for OpenAI-compatible text-generation providers.

Purpose:
    Issue streamed chat completions over pooled connections, bound the memory
    a single response may use, split inline reasoning from the answer, and
    recover JSON from malformed structured output. Every failure comes back
    as a result-level error.

Public API (re-exported):
    - Version: ``__version__``
    - Composition root: :class:`CompletionContext`
    - Engine and values: :class:`StreamingCompletionEngine`,
      :class:`ProviderConfig`, :class:`CompletionResult`
    - Errors: :class:`CompletionError`, :class:`ErrorCode` and subclasses
    - Configuration: :class:`Settings`
    - Request builders: :func:`build_chat_request_body`,
      :func:`build_tool_request_body`
"""

from .base.cancellation import CancellationToken
from .base.decoding import decode_structured, split_reasoning
from .base.errors import (
    CompletionError,
    ConfigurationError,
    DecodeError,
    EmptyResponseError,
    ErrorCode,
    ProviderConnectionError,
    ProviderResponseError,
    RequestError,
    StreamCancelledError,
    TruncationWarning,
)
from .base.health import check_endpoint
from .base.models import CompletionResult, ProviderConfig
from .base.resilience import RetryConfig, retry_completion
from .base.streaming import StreamingCompletionEngine
from .config import Settings
from .context import CompletionContext
from .requests import build_chat_request_body, build_tool_request_body

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CancellationToken",
    "CompletionContext",
    "CompletionError",
    "CompletionResult",
    "ConfigurationError",
    "DecodeError",
    "EmptyResponseError",
    "ErrorCode",
    "ProviderConfig",
    "ProviderConnectionError",
    "ProviderResponseError",
    "RequestError",
    "RetryConfig",
    "Settings",
    "StreamCancelledError",
    "StreamingCompletionEngine",
    "TruncationWarning",
    "build_chat_request_body",
    "build_tool_request_body",
    "check_endpoint",
    "decode_structured",
    "retry_completion",
    "split_reasoning",
]
