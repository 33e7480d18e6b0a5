"""
Structured completion error exception types.

Wraps transport, provider and decoding failures with a normalized `ErrorCode`
so the engine can convert them into a result-level ``error`` field and log
them consistently.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from .error_code import ErrorCode


class CompletionError(Exception):
    """Base class for every failure the completion client reports.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message suitable for logging.
        request_id: Identifier of the in-flight request, when known.
        endpoint: Provider endpoint the request targeted.
        model: Optional model name associated with the failure.
        retryable: Hint for caller-side retry logic (not authoritative).
        raw: Optional original exception for diagnostics.
    """

    default_code: ErrorCode = ErrorCode.UNKNOWN

    def __init__(
        self,
        message: str,
        *,
        code: Optional[ErrorCode] = None,
        request_id: Optional[str] = None,
        endpoint: Optional[str] = None,
        model: Optional[str] = None,
        retryable: bool = False,
        raw: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.code = code or self.default_code
        self.message = message
        self.request_id = request_id
        self.endpoint = endpoint
        self.model = model
        self.retryable = retryable
        self.raw = raw

    def __str__(self) -> str:  # pragma: no cover - trivial
        """Return a compact string combining endpoint, model, code, and message."""
        return f"{self.endpoint or '-'}:{self.model or '-'} {self.code.value}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "type": type(self).__name__,
            "code": self.code.value,
            "message": self.message,
            "request_id": self.request_id,
            "endpoint": self.endpoint,
            "model": self.model,
            "retryable": self.retryable,
        }
        return {k: v for k, v in data.items() if v is not None}


class ConfigurationError(CompletionError):
    """Provider configuration is missing endpoint, api key or model."""

    default_code = ErrorCode.CONFIGURATION


class RequestError(CompletionError):
    """The request body carries no message content."""

    default_code = ErrorCode.VALIDATION


class ProviderConnectionError(CompletionError):
    """Connection to the provider could not be established or was lost.

    The ``code`` is one of ``CONNECTION_REFUSED``, ``HOST_UNRESOLVED``,
    ``TIMEOUT`` or ``CONNECTION``; ``message`` is a provider-specific
    diagnostic rather than the raw transport text.
    """

    default_code = ErrorCode.CONNECTION


class ProviderResponseError(CompletionError):
    """The provider answered with a non-success HTTP status."""

    default_code = ErrorCode.SERVER_ERROR

    def __init__(self, message: str, *, status_code: Optional[int] = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.status_code is not None:
            data["status_code"] = self.status_code
        return data


class EmptyResponseError(CompletionError):
    """The stream finished without content on any channel."""

    default_code = ErrorCode.EMPTY_RESPONSE


class DecodeError(CompletionError):
    """Structured output could not be recovered after every repair attempt.

    ``raw_prefix`` holds a bounded prefix of the raw text, never the full text.
    """

    default_code = ErrorCode.DECODE

    def __init__(self, message: str, *, raw_prefix: str = "", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.raw_prefix = raw_prefix

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["raw_prefix"] = self.raw_prefix
        return data


class StreamCancelledError(CompletionError):
    """A caller-supplied cancellation token stopped the stream."""

    default_code = ErrorCode.CANCELLED


class TruncationWarning(UserWarning):
    """A channel hit its size ceiling; the result is still returned.

    Instances are attached to ``CompletionResult.warnings`` and never raised.
    """

    def __init__(self, channel: str, ceiling: int) -> None:
        super().__init__(f"{channel} channel truncated at {ceiling} characters")
        self.channel = channel
        self.ceiling = ceiling


__all__ = [
    "CompletionError",
    "ConfigurationError",
    "RequestError",
    "ProviderConnectionError",
    "ProviderResponseError",
    "EmptyResponseError",
    "DecodeError",
    "StreamCancelledError",
    "TruncationWarning",
]
