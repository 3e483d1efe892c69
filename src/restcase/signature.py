"""Call descriptors for resource actions.

An action accepts up to four positional arguments ``(params, data, on_success,
on_error)``, some of which may be omitted. :meth:`ActionCall.resolve`
normalizes the positional forms; the named constructors build the same
descriptor without any argument sniffing.

Positional forms:
    ========================  =============================================
    ``()``                    defaults
    ``(fn)``                  ``on_success=fn``
    ``(x)``                   ``data=x`` for POST/PUT/PATCH, else ``params=x``
    ``(fn1, fn2)``            ``on_success=fn1, on_error=fn2``
    ``(x, fn[, fn2])``        ``on_success=fn, on_error=fn2``; ``x`` as above
    ``(params, data[, fn])``  ``on_success=fn``
    ``(p, d, fn1, fn2)``      everything
    ========================  =============================================
"""

from __future__ import annotations

import dataclasses
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Self

from restcase.errors import BadArgumentCount

SuccessCallback = Callable[[Any, Mapping[str, str]], "Awaitable[None] | None"]
ErrorCallback = Callable[[Exception], "Awaitable[None] | None"]

MAX_POSITIONAL = 4


@dataclass(frozen=True, slots=True)
class ActionCall:
    """Canonical ``(params, data, on_success, on_error)`` for one action invocation."""

    params: Mapping[str, Any] = field(default_factory=dict)
    data: Any = None
    on_success: SuccessCallback | None = None
    on_error: ErrorCallback | None = None

    @classmethod
    def with_params(
        cls,
        params: Mapping[str, Any] | None = None,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> Self:
        return cls(params=params or {}, on_success=on_success, on_error=on_error)

    @classmethod
    def with_data(
        cls,
        data: Any,
        params: Mapping[str, Any] | None = None,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> Self:
        return cls(params=params or {}, data=data, on_success=on_success, on_error=on_error)

    @classmethod
    def callbacks(
        cls,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> Self:
        return cls(on_success=on_success, on_error=on_error)

    @classmethod
    def resolve(cls, args: Sequence[Any], *, has_body: bool) -> Self:
        """Normalize positional action arguments.

        Raises:
            BadArgumentCount: more than four arguments
        """
        count = len(args)
        if count > MAX_POSITIONAL:
            raise BadArgumentCount(count)
        a1, a2, a3, a4 = (*args, None, None, None, None)[:MAX_POSITIONAL]

        params: Any = {}
        data: Any = None
        success = error = None

        if count >= 2:
            if count == 4:
                error = a4
            if callable(a2):
                if callable(a1):
                    return cls.callbacks(a1, a2)
                # a1 is classified by the single-argument rule below
                success, error = a2, a3
            else:
                return cls(params=a1 or {}, data=a2, on_success=a3, on_error=error)

        if count >= 1:
            if callable(a1):
                success = a1
            elif has_body:
                data = a1
            else:
                params = a1

        return cls(params=params or {}, data=data, on_success=success, on_error=error)

    def merge(
        self,
        *,
        params: Mapping[str, Any] | None = None,
        data: Any = None,
        on_success: SuccessCallback | None = None,
        on_error: ErrorCallback | None = None,
    ) -> Self:
        """Override fields with the ones given (``None`` keeps the current value)."""
        changes = {
            key: value for key, value in (
                ("params", params), ("data", data), ("on_success", on_success), ("on_error", on_error),
            ) if value is not None
        }
        return dataclasses.replace(self, **changes) if changes else self
