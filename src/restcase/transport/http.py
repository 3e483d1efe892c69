"""httpx-backed transport.

Example:
    >>> async with HttpxTransport(base_url="https://api.example.com") as transport:
    ...     Volume = ResourceFactory(transport)("volume", "/api/volume/:id")
    ...     volume = await Volume.get({"id": 7})
"""

from __future__ import annotations

import logging
import re
import time
from typing import TYPE_CHECKING, Any, Self

import httpx
import orjson

from restcase.config import HttpSettings, get_settings
from restcase.errors import TransportError
from restcase.routing import build_url

from .base import RequestConfig, TransportResponse

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger("restcase.transport")

# XSSI guard some servers put in front of JSON bodies
_JSON_PREFIX = re.compile(rb"^\)\]\}',?\n")


def _decode(response: httpx.Response) -> Any:
    """JSON-decode bodies that look like JSON, else return text (``None`` when empty)."""
    body = response.content
    if not body:
        return None
    content_type = response.headers.get("content-type", "")
    text = _JSON_PREFIX.sub(b"", body.strip(), count=1)
    if "json" in content_type or text[:1] in (b"{", b"["):
        try:
            return orjson.loads(text)
        except orjson.JSONDecodeError:
            if "json" in content_type:
                raise
    return response.text


class HttpxTransport:
    """Transport over a lazily created ``httpx.AsyncClient``.

    Args:
        settings: HTTP defaults (falls back to the global settings)
        client: Pre-configured client; it is not closed by :meth:`aclose`
        base_url: Overrides ``settings.base_url``
    """

    def __init__(
        self,
        settings: HttpSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        base_url: str | None = None,
    ) -> None:
        self.settings = settings or get_settings().http
        self.base_url = self.settings.base_url if base_url is None else base_url.rstrip("/")
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_settings(cls) -> Self:
        return cls(get_settings().http)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                follow_redirects=self.settings.follow_redirects,
                max_redirects=self.settings.max_redirects,
                verify=self.settings.verify_ssl,
                timeout=self.settings.timeout,
            )
        return self._client

    def _headers(self, config: RequestConfig) -> dict[str, str]:
        headers = {"User-Agent": self.settings.user_agent, **self.settings.default_headers, **config.headers}
        if config.has_body and config.data is not None:
            headers.setdefault("Content-Type", "application/json;charset=utf-8")
        return headers

    async def send(self, config: RequestConfig) -> TransportResponse:
        url = build_url(self.base_url + config.url, config.params)
        content = orjson.dumps(config.data, default=str) if config.has_body and config.data is not None else None

        start = time.perf_counter()
        try:
            response = await self._get_client().request(
                config.method,
                url,
                headers=self._headers(config),
                content=content,
                timeout=config.timeout or self.settings.timeout,
            )
            data = _decode(response)
        except httpx.TimeoutException as e:
            raise TransportError.from_exception(e, f"{config.method} {url} timed out") from e
        except httpx.HTTPError as e:
            raise TransportError.from_exception(e, f"{config.method} {url} failed") from e
        except orjson.JSONDecodeError as e:
            raise TransportError.from_exception(e, f"{config.method} {url} returned invalid JSON") from e

        elapsed_ms = (time.perf_counter() - start) * 1000
        reply = TransportResponse(status=response.status_code, headers=dict(response.headers), data=data)
        logger.debug(f"{config.method} {url} -> {reply.status} ({elapsed_ms:.1f}ms)")
        if not reply.is_success:
            raise TransportError.from_response(reply)
        return reply

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
