"""Unified completion error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``completion_stream.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.completion_error import (
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
from .errors_parts.classification import (
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
