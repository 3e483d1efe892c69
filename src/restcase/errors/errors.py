"""Standardized error handling for resource clients.

Structural errors (bad member paths, bad parameter names, bad argument counts)
are programmer errors and raise synchronously before any I/O. Runtime errors
(bad response shape, transport failures) are delivered through the error
callback and the rejected request task.
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache
from typing import TYPE_CHECKING, Self

from pydantic import BaseModel

if TYPE_CHECKING:
    from restcase.transport import TransportResponse


class ErrorCode(StrEnum):
    """Standard error codes for resource failures."""
    BAD_MEMBER = "BAD_MEMBER"
    BAD_NAME = "BAD_NAME"
    BAD_ARGS = "BAD_ARGS"
    BAD_CONFIG = "BAD_CONFIG"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    HTTP_ERROR = "HTTP_ERROR"
    NOT_FOUND = "NOT_FOUND"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    RATE_LIMITED = "RATE_LIMITED"
    UNKNOWN = "UNKNOWN"


_PATTERN_CODES: dict[str, ErrorCode] = {
    "timeout": ErrorCode.TIMEOUT,
    "connect": ErrorCode.NETWORK_ERROR,
    "network": ErrorCode.NETWORK_ERROR,
    "protocol": ErrorCode.NETWORK_ERROR,
    "rate": ErrorCode.RATE_LIMITED,
    "permission": ErrorCode.PERMISSION_DENIED,
    "forbidden": ErrorCode.PERMISSION_DENIED,
    "notfound": ErrorCode.NOT_FOUND,
}
_PATTERN_KEYS = tuple(_PATTERN_CODES.keys())

_STATUS_CODES: dict[int, ErrorCode] = {
    401: ErrorCode.PERMISSION_DENIED,
    403: ErrorCode.PERMISSION_DENIED,
    404: ErrorCode.NOT_FOUND,
    429: ErrorCode.RATE_LIMITED,
}


@lru_cache(maxsize=256)
def _classify_cached(exc_key: str) -> ErrorCode:
    haystack = exc_key.lower()
    for pattern in _PATTERN_KEYS:
        if pattern in haystack:
            return _PATTERN_CODES[pattern]
    return ErrorCode.UNKNOWN


def classify_exception(exc: BaseException) -> ErrorCode:
    """Map exception to error code via pattern matching on name/message."""
    return _classify_cached(f"{type(exc).__name__} {exc}")


class ResourceError(BaseModel):
    """Structured description of a resource failure."""

    model_config = {"frozen": True}

    source: str
    message: str
    code: ErrorCode = ErrorCode.UNKNOWN
    recoverable: bool = False
    status: int | None = None
    details: str | None = None

    def render(self) -> str:
        status = f" HTTP {self.status}" if self.status is not None else ""
        parts = [f"[{self.source}] {self.code}{status}: {self.message}"]
        if self.details:
            parts.append(f"\n{self.details}")
        return "".join(parts)

    __str__ = render


class ResourceException(Exception):
    """Exception wrapping a ResourceError for raising."""

    def __init__(self, error: ResourceError) -> None:
        self.error = error
        super().__init__(error.message)

    @property
    def code(self) -> ErrorCode:
        return self.error.code

    @property
    def recoverable(self) -> bool:
        return self.error.recoverable


class BadMemberPath(ResourceException):
    """A ``@``-prefixed parameter value names an invalid or forbidden member path."""

    def __init__(self, path: str | None) -> None:
        self.path = path
        super().__init__(ResourceError(
            source="params",
            message=f'Dotted member path "@{path}" is invalid.',
            code=ErrorCode.BAD_MEMBER,
        ))


class BadParamName(ResourceException):
    """A url template token uses a forbidden name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(ResourceError(
            source="route",
            message=f"{name} is not a valid parameter name.",
            code=ErrorCode.BAD_NAME,
        ))


class BadArgumentCount(ResourceException):
    """An action was called with more than four positional arguments."""

    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(ResourceError(
            source="signature",
            message=(
                "Expected up to 4 arguments [params, data, on_success, on_error], "
                f"got {count} arguments"
            ),
            code=ErrorCode.BAD_ARGS,
        ))


class BadResponseShape(ResourceException):
    """The payload's array-ness disagrees with the action's ``is_array``."""

    def __init__(self, expected: str, actual: str) -> None:
        self.expected, self.actual = expected, actual
        super().__init__(ResourceError(
            source="pipeline",
            message=(
                "Error in resource configuration. "
                f"Expected response to contain an {expected} but got an {actual}"
            ),
            code=ErrorCode.BAD_CONFIG,
        ))


class TransportError(ResourceException):
    """Network or HTTP failure. Never retried by the pipeline."""

    def __init__(self, error: ResourceError, response: TransportResponse | None = None) -> None:
        self.response = response
        super().__init__(error)

    @property
    def status(self) -> int | None:
        return self.error.status

    @classmethod
    def from_response(cls, response: TransportResponse) -> Self:
        """Create from a non-2xx response."""
        status = response.status
        return cls(ResourceError(
            source="transport",
            message=f"Request failed with status {status}",
            code=_STATUS_CODES.get(status, ErrorCode.HTTP_ERROR),
            recoverable=status >= 500 or status == 429,
            status=status,
        ), response)

    @classmethod
    def from_exception(cls, exc: BaseException, context: str = "") -> Self:
        """Create from a low-level exception with auto-classification."""
        code = classify_exception(exc)
        return cls(ResourceError(
            source="transport",
            message=f"{context}: {exc}" if context else str(exc) or type(exc).__name__,
            code=code,
            recoverable=code in _RETRYABLE_CODES,
            details=type(exc).__name__,
        ))


_RETRYABLE_CODES: frozenset[ErrorCode] = frozenset({
    ErrorCode.RATE_LIMITED,
    ErrorCode.TIMEOUT,
    ErrorCode.NETWORK_ERROR,
})
