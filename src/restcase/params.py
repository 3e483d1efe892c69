"""Parameter extraction from request payloads.

A declared parameter value is used as-is, called first when it is a
zero-argument producer, or looked up inside the payload when it is a string of
the form ``@a.b.c``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from restcase.errors import BadMemberPath

_MEMBER_PATH = re.compile(r"^(\.[a-zA-Z_$][0-9a-zA-Z_$]*)+$")
_FORBIDDEN_MEMBER = "hasOwnProperty"


def is_valid_dotted_path(path: str | None) -> bool:
    if not path or not _MEMBER_PATH.match("." + path):
        return False
    return _FORBIDDEN_MEMBER not in path.split(".")


def _member(obj: Any, key: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


def lookup_dotted_path(obj: Any, path: str) -> Any:
    """Read ``path`` from ``obj``; ``None`` as soon as an intermediate is missing.

    Raises:
        BadMemberPath: ``path`` is not a dotted identifier path or names ``hasOwnProperty``
    """
    if not is_valid_dotted_path(path):
        raise BadMemberPath(path)
    for key in path.split("."):
        if obj is None:
            return None
        obj = _member(obj, key)
    return obj


def extract_params(
    data: Any,
    action_params: Mapping[str, Any] | None = None,
    defaults: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Resolve declared parameters against a payload. Action params override defaults."""
    ids: dict[str, Any] = {}
    for key, value in {**(defaults or {}), **(action_params or {})}.items():
        if callable(value):
            value = value()
        if isinstance(value, str) and value.startswith("@"):
            value = lookup_dotted_path(data, value[1:])
        ids[key] = value
    return ids
