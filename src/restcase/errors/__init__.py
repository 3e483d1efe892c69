"""Error handling for restcase.

- ErrorCode: Standard error codes for resource failures
- ResourceError/ResourceException: Structured errors and exceptions
- BadMemberPath/BadParamName/BadArgumentCount: fail-fast configuration errors
- BadResponseShape/TransportError: runtime errors delivered asynchronously
"""

from .errors import (
    BadArgumentCount,
    BadMemberPath,
    BadParamName,
    BadResponseShape,
    ErrorCode,
    ResourceError,
    ResourceException,
    TransportError,
    classify_exception,
)

__all__ = [
    "ErrorCode", "ResourceError", "ResourceException", "classify_exception",
    "BadMemberPath", "BadParamName", "BadArgumentCount",
    "BadResponseShape", "TransportError",
]
