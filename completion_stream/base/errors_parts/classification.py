"""
Error classification helpers mapping exceptions to normalized ErrorCode values.

Implements HTTP status extraction, status-to-code mapping, connection failure
classification over the exception cause chain, and message-based heuristics
as a fallback for transports that only expose text.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Iterator, Optional

import httpx
import openai

from .completion_error import (
    CompletionError,
    ProviderConnectionError,
    ProviderResponseError,
)
from .error_code import ErrorCode


def _extract_status(exc: BaseException) -> Optional[int]:
    """Attempt to extract an HTTP status code from a provider exception.

    Supported attribute shapes (checked in order):
    - ``exc.status_code``
    - ``exc.status``
    - ``exc.response.status_code``
    Returns ``None`` if no valid status can be found.
    """
    for attr in ("status_code", "status"):
        val = getattr(exc, attr, None)
        if isinstance(val, int) and 100 <= val < 600:
            return val
    resp = getattr(exc, "response", None)
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.TIMEOUT,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.SERVER_ERROR,
    502: ErrorCode.TRANSIENT,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
}

_REFUSED_MARKERS = ("econnrefused", "connection refused", "errno 111", "actively refused")
_UNRESOLVED_MARKERS = (
    "enotfound",
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated",
    "name resolution",
)
_TIMEOUT_MARKERS = ("etimedout", "timed out", "timeout")

_CONNECTION_TYPES = (ConnectionError, httpx.TransportError, openai.APIConnectionError)


def _heuristic_from_message(msg: str) -> Optional[ErrorCode]:  # pragma: no cover - simple mapping
    """Substring heuristic mapping for exceptions without a status code."""
    PATTERN_GROUPS = (
        (ErrorCode.RATE_LIMIT, ("rate", "limit")),
        (ErrorCode.CONNECTION_REFUSED, _REFUSED_MARKERS),
        (ErrorCode.HOST_UNRESOLVED, _UNRESOLVED_MARKERS),
        (ErrorCode.TIMEOUT, _TIMEOUT_MARKERS),
        (ErrorCode.AUTH, ("unauthorized", "api key", "forbidden")),
        (ErrorCode.NOT_FOUND, ("not found", "does not exist")),
        (ErrorCode.UNAVAILABLE, ("unavailable", "temporarily down")),
        (ErrorCode.VALIDATION, ("validation", "invalid", "malformed")),
        (ErrorCode.SERVER_ERROR, ("server error", "internal error")),
    )
    for code, patterns in PATTERN_GROUPS:
        if code is ErrorCode.RATE_LIMIT:
            if all(p in msg for p in patterns):
                return code
            continue
        if any(p in msg for p in patterns):
            return code
    return None


def _iter_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield ``exc`` and its ``__cause__``/``__context__`` ancestors once each."""
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def is_connection_failure(exc: BaseException) -> bool:
    """Return True when any exception in the chain is a transport failure."""
    return any(
        isinstance(e, _CONNECTION_TYPES) or isinstance(e, (TimeoutError, asyncio.TimeoutError))
        for e in _iter_chain(exc)
    )


def classify_connection_failure(exc: BaseException) -> ErrorCode:
    """Classify a connection-establishment failure.

    Timeout types win first, then refused/unresolved markers found in any
    message of the cause chain, then the generic ``CONNECTION`` category.
    """
    chain = list(_iter_chain(exc))
    for e in chain:
        if isinstance(e, (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException, openai.APITimeoutError)):
            return ErrorCode.TIMEOUT
    text = " ".join(str(e).lower() for e in chain)
    if any(m in text for m in _REFUSED_MARKERS):
        return ErrorCode.CONNECTION_REFUSED
    if any(m in text for m in _UNRESOLVED_MARKERS):
        return ErrorCode.HOST_UNRESOLVED
    if any(m in text for m in _TIMEOUT_MARKERS):
        return ErrorCode.TIMEOUT
    return ErrorCode.CONNECTION


def connection_diagnostic(code: ErrorCode, endpoint: Optional[str]) -> str:
    """Build the user-facing diagnostic for a classified connection failure."""
    where = endpoint or "the configured endpoint"
    if code is ErrorCode.CONNECTION_REFUSED:
        return f"Connection refused by {where}. Check that the completion server is running and listening on that port."
    if code is ErrorCode.HOST_UNRESOLVED:
        return f"Could not resolve the host for {where}. Check the endpoint URL and DNS settings."
    if code is ErrorCode.TIMEOUT:
        return f"Timed out connecting to {where}. The server may be overloaded or unreachable."
    return f"Could not connect to {where}. Verify the endpoint URL and network connectivity."


def classify_exception(exc: BaseException) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. CompletionError passthrough.
        2. HTTP status mapping.
        3. Transport failures (refused, unresolved, timeout, generic).
        4. Substring heuristics.
        5. ``UNKNOWN`` fallback.
    """
    if isinstance(exc, CompletionError):
        return exc.code
    status = _extract_status(exc)
    if status is not None:
        if status in _HTTP_STATUS_MAP:
            return _HTTP_STATUS_MAP[status]
        return ErrorCode.SERVER_ERROR if status >= 500 else ErrorCode.VALIDATION
    if is_connection_failure(exc):
        return classify_connection_failure(exc)
    code = _heuristic_from_message(str(exc).lower())
    return code if code is not None else ErrorCode.UNKNOWN


_RETRYABLE = (
    ErrorCode.RATE_LIMIT,
    ErrorCode.TRANSIENT,
    ErrorCode.UNAVAILABLE,
    ErrorCode.TIMEOUT,
    ErrorCode.CONNECTION_REFUSED,
    ErrorCode.CONNECTION,
)


def to_completion_error(
    exc: BaseException,
    *,
    request_id: Optional[str] = None,
    endpoint: Optional[str] = None,
    model: Optional[str] = None,
) -> CompletionError:
    """Convert any exception raised by the transport into a ``CompletionError``.

    Connection failures become :class:`ProviderConnectionError` with a
    diagnostic message; status failures become :class:`ProviderResponseError`.
    """
    if isinstance(exc, CompletionError):
        exc.request_id = exc.request_id or request_id
        exc.endpoint = exc.endpoint or endpoint
        exc.model = exc.model or model
        return exc
    status = _extract_status(exc)
    code = classify_exception(exc)
    if status is not None:
        return ProviderResponseError(
            f"Provider returned HTTP {status}: {str(exc)[:260]}",
            code=code,
            status_code=status,
            request_id=request_id,
            endpoint=endpoint,
            model=model,
            retryable=code in _RETRYABLE,
            raw=exc,
        )
    if is_connection_failure(exc):
        return ProviderConnectionError(
            connection_diagnostic(code, endpoint),
            code=code,
            request_id=request_id,
            endpoint=endpoint,
            model=model,
            retryable=code in _RETRYABLE,
            raw=exc,
        )
    return CompletionError(
        str(exc)[:260] or exc.__class__.__name__,
        code=code,
        request_id=request_id,
        endpoint=endpoint,
        model=model,
        retryable=code in _RETRYABLE,
        raw=exc,
    )


__all__ = [
    "classify_exception",
    "classify_connection_failure",
    "connection_diagnostic",
    "is_connection_failure",
    "to_completion_error",
    "_extract_status",
    "_HTTP_STATUS_MAP",
]
