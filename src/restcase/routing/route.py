"""URL template compilation.

A template is literal text with ``:name`` tokens. ``\\:`` escapes a literal
colon. Tokens without a value are dropped together with their leading slash,
and parameters that are not tokens become query parameters.

Example:
    >>> route = Route("/api/:type/:id")
    >>> route.resolve({"type": "volume", "id": 5})
    ('/api/volume/5', {})
    >>> route.resolve({"type": "volume", "q": "x y"})
    ('/api/volume', {'q': 'x y'})
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from functools import lru_cache

from restcase.errors import BadParamName

from .encoding import encode_uri_segment

_FORBIDDEN_NAME = "hasOwnProperty"
_NUMERIC = re.compile(r"^\d+$")
_SPLIT = re.compile(r"\W", re.ASCII)
_TRAILING_SLASHES = re.compile(r"/+$")
_EXTENSION = re.compile(r"/\.(?=\w+($|\?))", re.ASCII)


@lru_cache(maxsize=256)
def url_params(template: str) -> tuple[str, ...]:
    """Names of the ``:name`` tokens in ``template``, in order of appearance.

    Raises:
        BadParamName: a token (or any word of the template) is ``hasOwnProperty``
    """
    names: list[str] = []
    for candidate in _SPLIT.split(template):
        if candidate == _FORBIDDEN_NAME:
            raise BadParamName(candidate)
        if not candidate or _NUMERIC.match(candidate) or candidate in names:
            continue
        if re.search(rf"(^|[^\\]):{candidate}(\W|$)", template, re.ASCII):
            names.append(candidate)
    return tuple(names)


class Route:
    """Compiled url template with optional token defaults."""

    __slots__ = ("template", "defaults")

    def __init__(self, template: str, defaults: Mapping[str, object] | None = None) -> None:
        self.template = template
        self.defaults = dict(defaults or {})
        url_params(template)

    def __repr__(self) -> str:
        return f"Route({self.template!r})"

    @property
    def tokens(self) -> tuple[str, ...]:
        return url_params(self.template)

    def resolve(
        self,
        params: Mapping[str, object] | None = None,
        action_url: str | None = None,
    ) -> tuple[str, dict[str, object]]:
        """Substitute ``params`` into the template.

        Returns the url and the parameters left over for the query string.
        ``action_url`` replaces the template for a single action.
        """
        url = action_url or self.template
        names = url_params(url)
        params = params or {}

        url = url.replace("\\:", ":")
        for name in names:
            value = params[name] if name in params else self.defaults.get(name)
            if value is not None:
                encoded = encode_uri_segment(value)
                url = re.sub(rf":{name}(\W|$)", lambda m: encoded + m.group(1), url, flags=re.ASCII)
            else:
                url = re.sub(rf"(/?):{name}(\W|$)", _drop_token, url, flags=re.ASCII)

        url = _TRAILING_SLASHES.sub("", url) or "/"
        url = _EXTENSION.sub(".", url, count=1)
        url = url.replace("/\\.", "/.", 1)

        query = {key: value for key, value in params.items() if key not in names}
        return url, query


def _drop_token(match: re.Match[str]) -> str:
    leading, tail = match.group(1), match.group(2)
    return tail if tail.startswith("/") else leading + tail
