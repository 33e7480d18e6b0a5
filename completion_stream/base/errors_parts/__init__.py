"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `completion_stream.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .completion_error import (
    CompletionError,
    ConfigurationError,
    DecodeError,
    EmptyResponseError,
    ProviderConnectionError,
    ProviderResponseError,
    RequestError,
    StreamCancelledError,
    TruncationWarning,
)
from .classification import (
    classify_connection_failure,
    classify_exception,
    connection_diagnostic,
    is_connection_failure,
    to_completion_error,
)

__all__ = [
    "ErrorCode",
    "CompletionError",
    "ConfigurationError",
    "RequestError",
    "ProviderConnectionError",
    "ProviderResponseError",
    "EmptyResponseError",
    "DecodeError",
    "StreamCancelledError",
    "TruncationWarning",
    "classify_exception",
    "classify_connection_failure",
    "connection_diagnostic",
    "is_connection_failure",
    "to_completion_error",
]
