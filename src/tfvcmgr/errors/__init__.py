"""Public error exports for tfvcmgr."""

from __future__ import annotations

from .exceptions import (
    ApiError,
    AuthError,
    HttpErrorInfo,
    InvalidArgumentError,
    InvalidServerPathError,
    InvalidStateError,
    NetworkError,
    NotFoundError,
    PermissionError,
    PolicyEvaluationCancelledError,
    PolicyEvaluationError,
    PolicyLoadError,
    PreconditionError,
    RateLimitError,
    TfvcMgrError,
    TransportError,
    map_http_error,
)

__all__ = [
    "TfvcMgrError",
    "InvalidArgumentError",
    "PreconditionError",
    "InvalidServerPathError",
    "InvalidStateError",
    "TransportError",
    "AuthError",
    "PermissionError",
    "NotFoundError",
    "RateLimitError",
    "NetworkError",
    "ApiError",
    "PolicyEvaluationCancelledError",
    "PolicyEvaluationError",
    "PolicyLoadError",
    "HttpErrorInfo",
    "map_http_error",
]
