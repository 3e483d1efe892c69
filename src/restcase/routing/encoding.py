"""URI encoding for path segments and query strings.

Both encoders start from ``encodeURIComponent``-style percent encoding and keep
``@ : $ ,`` readable. Path segments additionally keep ``& = +`` and encode a
space as ``%20``; query values encode a space as ``+``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date
from urllib.parse import quote

import orjson

# quote() always leaves ``A-Za-z0-9_.-~`` alone
_COMPONENT_SAFE = "!*'()"
_QUERY_SAFE = _COMPONENT_SAFE + "@:$,"
_SEGMENT_SAFE = _QUERY_SAFE + "&=+"


def stringify(value: object) -> str:
    """Render a parameter value the way it appears in a url."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def encode_uri_query(value: object, pct_encode_spaces: bool = False) -> str:
    encoded = quote(stringify(value), safe=_QUERY_SAFE)
    return encoded if pct_encode_spaces else encoded.replace("%20", "+")


def encode_uri_segment(value: object) -> str:
    return quote(stringify(value), safe=_SEGMENT_SAFE)


def _query_value(value: object) -> object:
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (Mapping, list, tuple)):
        return orjson.dumps(value, default=str).decode()
    return value


def build_url(url: str, params: Mapping[str, object] | None) -> str:
    """Append ``params`` to ``url`` as a query string.

    Keys are sorted, ``None`` values are skipped, sequences repeat their key and
    mappings are sent as JSON.
    """
    if not params:
        return url
    parts: list[str] = []
    for key in sorted(params):
        value = params[key]
        if value is None:
            continue
        values = value if isinstance(value, Sequence) and not isinstance(value, (str, bytes)) else [value]
        for item in values:
            parts.append(f"{encode_uri_query(key)}={encode_uri_query(_query_value(item))}")
    if not parts:
        return url
    return url + ("&" if "?" in url else "?") + "&".join(parts)
