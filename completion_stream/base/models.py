"""Request/response value objects for the completion client.

``ProviderConfig`` is supplied by the caller for each request and never
mutated. ``CompletionResult`` is what :meth:`StreamingCompletionEngine.complete`
returns: either a populated success or a failure carrying only ``request_id``
and ``error``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .errors import CompletionError, TruncationWarning


@dataclass(frozen=True)
class ProviderConfig:
    """Connection settings for one OpenAI-compatible provider.

    Attributes:
        endpoint: Base URL of the provider API (e.g. ``http://host:5000/v1``).
        api_key: Credential sent as a bearer token.
        model: Model id used when the request body does not name one.
        model_type: Tokenizer family hint (e.g. ``qwen2``, ``gpt-4o``).
        max_tokens: Default ``max_tokens`` when the body does not set one.
    """

    endpoint: Optional[str]
    api_key: Optional[str] = field(default=None, repr=False)
    model: Optional[str] = None
    model_type: Optional[str] = None
    max_tokens: Optional[int] = None

    def missing_fields(self) -> List[str]:
        return [name for name in ("endpoint", "api_key", "model") if not getattr(self, name)]

    @classmethod
    def from_settings(cls, get_config: Callable[[str], Any], mode: str = "chat") -> "ProviderConfig":
        """Build a config from ``models.<mode>.*`` dot paths."""
        prefix = f"models.{mode}"
        max_tokens = get_config(f"{prefix}.maxTokens")
        try:
            max_tokens = int(max_tokens) if max_tokens not in (None, "") else None
        except (TypeError, ValueError):
            max_tokens = None
        return cls(
            endpoint=get_config(f"{prefix}.endpoint"),
            api_key=get_config(f"{prefix}.apiKey"),
            model=get_config(f"{prefix}.model"),
            model_type=get_config(f"{prefix}.modelType"),
            max_tokens=max_tokens,
        )


@dataclass(frozen=True)
class CompletionResult:
    """Outcome of one streamed completion request."""

    request_id: str
    final_text: Optional[str] = None
    reasoning_text: Optional[str] = None
    time_to_first_token_ms: Optional[float] = None
    tokens_per_second: Optional[float] = None
    output_tokens: Optional[int] = None
    total_duration_ms: Optional[float] = None
    truncated: bool = False
    structured: Optional[Any] = None
    structured_strategy: Optional[str] = None
    warnings: Tuple[TruncationWarning, ...] = ()
    error: Optional[CompletionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, request_id: str, error: CompletionError) -> "CompletionResult":
        """Failure shape: only ``request_id`` and ``error`` are populated."""
        return cls(request_id=request_id, error=error)

    def to_dict(self) -> Dict[str, Any]:
        if self.error is not None:
            return {"request_id": self.request_id, "error": self.error.to_dict()}
        return {
            "request_id": self.request_id,
            "final_text": self.final_text,
            "reasoning_text": self.reasoning_text,
            "time_to_first_token_ms": self.time_to_first_token_ms,
            "tokens_per_second": self.tokens_per_second,
            "output_tokens": self.output_tokens,
            "total_duration_ms": self.total_duration_ms,
            "truncated": self.truncated,
            "structured": self.structured,
            "structured_strategy": self.structured_strategy,
            "warnings": [str(w) for w in self.warnings],
        }


__all__ = ["ProviderConfig", "CompletionResult"]
