"""Tests for action call resolution over every supported arity."""

from __future__ import annotations

from typing import Any

import pytest

from restcase.errors import BadArgumentCount, ErrorCode
from restcase.signature import ActionCall


def ok(value: Any, headers: Any) -> None: ...
def fail(error: Exception) -> None: ...
def extra(*_: Any) -> None: ...


P = {"id": 1}
D = {"name": "x"}


# (args, has_body) -> (params, data, on_success, on_error)
CASES: list[tuple[tuple[Any, ...], bool, tuple[Any, Any, Any, Any]]] = [
    # 0 args
    ((), False, ({}, None, None, None)),
    ((), True, ({}, None, None, None)),
    # 1 arg
    ((ok,), False, ({}, None, ok, None)),
    ((P,), False, (P, None, None, None)),
    ((D,), True, ({}, D, None, None)),
    # 2 args
    ((ok, fail), False, ({}, None, ok, fail)),
    ((P, ok), False, (P, None, ok, None)),
    ((D, ok), True, ({}, D, ok, None)),
    ((P, D), False, (P, D, None, None)),
    ((P, D), True, (P, D, None, None)),
    # 3 args
    ((ok, fail, extra), False, ({}, None, ok, fail)),
    ((P, ok, fail), False, (P, None, ok, fail)),
    ((D, ok, fail), True, ({}, D, ok, fail)),
    ((P, D, ok), True, (P, D, ok, None)),
    # 4 args
    ((P, D, ok, fail), True, (P, D, ok, fail)),
    ((P, D, ok, fail), False, (P, D, ok, fail)),
    ((ok, fail, extra, extra), False, ({}, None, ok, fail)),
    ((P, ok, fail, extra), False, (P, None, ok, fail)),
    ((D, ok, fail, extra), True, ({}, D, ok, fail)),
]


@pytest.mark.parametrize(("args", "has_body", "expected"), CASES)
def test_resolution_table(args: tuple[Any, ...], has_body: bool, expected: tuple[Any, Any, Any, Any]) -> None:
    call = ActionCall.resolve(args, has_body=has_body)
    assert (call.params, call.data, call.on_success, call.on_error) == expected


@pytest.mark.parametrize("count", [5, 6, 9])
def test_too_many_arguments(count: int) -> None:
    with pytest.raises(BadArgumentCount) as exc_info:
        ActionCall.resolve([{}] * count, has_body=False)
    assert exc_info.value.count == count
    assert exc_info.value.code == ErrorCode.BAD_ARGS
    assert f"got {count} arguments" in str(exc_info.value)


def test_none_params_normalized() -> None:
    assert ActionCall.resolve((None,), has_body=False).params == {}
    assert ActionCall.resolve((None, D), has_body=False).params == {}


# ─────────────────────────────────────────────────────────────────────────────
# Named constructors
# ─────────────────────────────────────────────────────────────────────────────


def test_named_constructors() -> None:
    assert ActionCall.with_params(P, ok) == ActionCall(params=P, on_success=ok)
    assert ActionCall.with_data(D, P, ok, fail) == ActionCall(params=P, data=D, on_success=ok, on_error=fail)
    assert ActionCall.callbacks(ok, fail) == ActionCall(on_success=ok, on_error=fail)
    assert ActionCall.with_params() == ActionCall()


def test_merge_overrides_only_given_fields() -> None:
    base = ActionCall.with_params(P, ok)
    merged = base.merge(data=D, on_error=fail)
    assert merged == ActionCall(params=P, data=D, on_success=ok, on_error=fail)
    assert base.merge() is base
