"""
Completion client base package

Exports the building blocks the composition root wires together:
- Pool: bounded, least-recently-used provider clients
- Caches: template and per-user ephemeral caches plus their janitor
- Engine: streamed completions with ceilings and timing metadata
- Decoding: reasoning segmentation and structured (JSON) recovery
"""

from .cache import BoundedCache, EphemeralResultCache, TemplateCache
from .cancellation import CancellationToken, CancelledError
from .decoding import ReasoningTags, decode_structured, split_reasoning
from .errors import CompletionError, ErrorCode
from .health import check_endpoint
from .http import ProviderClientPool
from .janitor import CacheJanitor
from .models import CompletionResult, ProviderConfig
from .streaming import StreamingCompletionEngine
from .timeouts import TimeoutConfig, get_timeout_config
from .tokens import TokenCounter

__all__ = [
    "BoundedCache",
    "EphemeralResultCache",
    "TemplateCache",
    "CancellationToken",
    "CancelledError",
    "ReasoningTags",
    "decode_structured",
    "split_reasoning",
    "CompletionError",
    "ErrorCode",
    "check_endpoint",
    "ProviderClientPool",
    "CacheJanitor",
    "CompletionResult",
    "ProviderConfig",
    "StreamingCompletionEngine",
    "TimeoutConfig",
    "get_timeout_config",
    "TokenCounter",
]
