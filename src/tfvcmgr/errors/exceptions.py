"""Exception hierarchy and HTTP error mapping for tfvcmgr."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class TfvcMgrError(Exception):
    """
    Base exception for tfvcmgr.

    Attributes:
        details: Optional structured information (e.g., HTTP status, path).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class InvalidArgumentError(TfvcMgrError):
    """Raised when arguments are invalid."""


class PreconditionError(InvalidArgumentError):
    """Raised when required argument state is missing (checked before any I/O)."""


class InvalidServerPathError(InvalidArgumentError):
    """Raised when a string is not a valid server path ("$/...")."""


class InvalidStateError(TfvcMgrError):
    """Raised when an object is used in an invalid state (e.g., after close)."""


class TransportError(TfvcMgrError):
    """Base class for network/authorization failures talking to the server."""


class AuthError(TransportError):
    """Raised when authentication fails (HTTP 401)."""


class PermissionError(TransportError):
    """Raised when access is denied (HTTP 403)."""


class NotFoundError(TransportError):
    """Raised when a server resource is not found (HTTP 404)."""


class RateLimitError(TransportError):
    """Raised when rate-limited (HTTP 429)."""


class NetworkError(TransportError):
    """Raised when network/timeout issues prevent the request."""


class ApiError(TransportError):
    """Raised for unclassified server errors (5xx, unknown 4xx, etc.)."""


class PolicyEvaluationCancelledError(TfvcMgrError):
    """
    Raised by a policy evaluator when the user cancels evaluation.

    This is a signal, not a failure: the evaluation pipeline turns it into
    an ``EvaluationCanceled`` outcome.
    """

    def __init__(self, message: str = "Policy evaluation was cancelled", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class PolicyEvaluationError(TfvcMgrError):
    """Raised by a policy evaluator when the policy framework itself failed."""


class PolicyLoadError(TfvcMgrError):
    """Raised by a policy loader when a policy implementation fails to load."""


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to tfvcmgr exceptions."""

    status_code: int
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> TransportError:
    """
    Map an HTTP error to a tfvcmgr transport exception.

    Policy:
        - 401 -> AuthError
        - 403 -> PermissionError
        - 404 -> NotFoundError
        - 429 -> RateLimitError
        - otherwise -> ApiError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "reason": info.reason,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code == 401:
        return AuthError(message, details=details, cause=cause)
    if info.status_code == 403:
        return PermissionError(message, details=details, cause=cause)
    if info.status_code == 404:
        return NotFoundError(message, details=details, cause=cause)
    if info.status_code == 429:
        return RateLimitError(message, details=details, cause=cause)

    return ApiError(message, details=details, cause=cause)
