"""
Normalized completion error codes (taxonomy).

Defines the `ErrorCode` enumeration used by the pool, the streaming engine and
the decoder. Values are lowercase snake_case and are considered a stable
public contract for logging and analytics.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated normalized error codes representing failure categories."""

    CONFIGURATION = "configuration"
    VALIDATION = "validation"
    CONNECTION_REFUSED = "connection_refused"
    HOST_UNRESOLVED = "host_unresolved"
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    TRANSIENT = "transient"
    SERVER_ERROR = "server_error"
    UNAVAILABLE = "unavailable"
    EMPTY_RESPONSE = "empty_response"
    DECODE = "decode"
    CANCELLED = "cancelled"
    INTERNAL = "internal"
    UNKNOWN = "unknown"


__all__ = ["ErrorCode"]
