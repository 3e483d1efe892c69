"""Tests for the httpx transport and the in-memory test transport."""

from __future__ import annotations

from typing import Any

import httpx
import orjson
import pytest

from restcase.cache import CacheStore, MemoryResourceCache
from restcase.config import HttpSettings
from restcase.errors import ErrorCode, TransportError
from restcase.resource import ResourceFactory
from restcase.testing import MockTransport
from restcase.transport import HttpxTransport, RequestConfig, Transport, TransportResponse

BASE_URL = "https://api.test"


class Recorder:
    """httpx handler answering with a fixed response and keeping every request."""

    def __init__(self, status: int = 200, json: Any = None, content: bytes = b"", headers: dict[str, str] | None = None) -> None:
        self.status, self.json, self.content = status, json, content
        self.headers = headers or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.json is not None:
            return httpx.Response(self.status, json=self.json, headers=self.headers)
        return httpx.Response(self.status, content=self.content, headers=self.headers)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def http_transport(handler: Any) -> HttpxTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpxTransport(HttpSettings(), client=client, base_url=BASE_URL + "/")


# ─────────────────────────────────────────────────────────────────────────────
# HttpxTransport
# ─────────────────────────────────────────────────────────────────────────────


class TestHttpxTransport:
    @pytest.mark.asyncio
    async def test_get_with_query(self) -> None:
        recorder = Recorder(json={"id": 7})
        transport = http_transport(recorder)

        reply = await transport.send(RequestConfig(url="/api/volume/7", params={"full": True, "tag": ["a", "b"]}))

        assert reply.status == 200
        assert reply.data == {"id": 7}
        request = recorder.last
        assert request.method == "GET"
        assert request.url.path == "/api/volume/7"
        assert request.url.params.get_list("tag") == ["a", "b"]
        assert request.url.params["full"] == "true"
        assert request.headers["user-agent"] == "restcase/1.0"
        assert request.headers["accept"] == "application/json, text/plain, */*"
        assert request.content == b""

    @pytest.mark.asyncio
    async def test_post_sends_json_body(self) -> None:
        recorder = Recorder(status=201, json={"id": 8, "name": "X"})
        transport = http_transport(recorder)

        reply = await transport.send(RequestConfig(method="post", url="/api/volume", data={"name": "X"}, headers={"X-Trace": "1"}))

        assert reply.data == {"id": 8, "name": "X"}
        request = recorder.last
        assert request.method == "POST"
        assert orjson.loads(request.content) == {"name": "X"}
        assert request.headers["content-type"] == "application/json;charset=utf-8"
        assert request.headers["x-trace"] == "1"

    @pytest.mark.asyncio
    async def test_body_never_sent_for_get(self) -> None:
        recorder = Recorder(json={})
        transport = http_transport(recorder)
        await transport.send(RequestConfig(url="/api/volume", data={"ignored": True}))
        assert recorder.last.content == b""
        assert "content-type" not in recorder.last.headers

    @pytest.mark.asyncio
    async def test_timeout_override(self) -> None:
        recorder = Recorder(json={})
        transport = http_transport(recorder)
        await transport.send(RequestConfig(url="/api/volume", timeout=5))
        assert recorder.last.extensions["timeout"]["read"] == 5

    @pytest.mark.asyncio
    async def test_xssi_prefix_stripped(self) -> None:
        recorder = Recorder(content=b")]}',\n{\"id\": 1}", headers={"content-type": "application/json"})
        reply = await http_transport(recorder).send(RequestConfig(url="/api/volume/1"))
        assert reply.data == {"id": 1}

    @pytest.mark.asyncio
    async def test_json_sniffed_without_content_type(self) -> None:
        recorder = Recorder(content=b"[1, 2]")
        reply = await http_transport(recorder).send(RequestConfig(url="/api/volume"))
        assert reply.data == [1, 2]

    @pytest.mark.asyncio
    async def test_text_and_empty_bodies(self) -> None:
        text = await http_transport(Recorder(content=b"pong", headers={"content-type": "text/plain"})).send(
            RequestConfig(url="/ping")
        )
        assert text.data == "pong"

        empty = await http_transport(Recorder(status=204)).send(RequestConfig(method="DELETE", url="/api/volume/1"))
        assert empty.status == 204
        assert empty.data is None

    @pytest.mark.asyncio
    async def test_invalid_json_is_transport_error(self) -> None:
        recorder = Recorder(content=b"{nope", headers={"content-type": "application/json"})
        with pytest.raises(TransportError) as exc_info:
            await http_transport(recorder).send(RequestConfig(url="/api/volume/1"))
        assert exc_info.value.error.details == "JSONDecodeError"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "code", "recoverable"),
        [
            (401, ErrorCode.PERMISSION_DENIED, False),
            (403, ErrorCode.PERMISSION_DENIED, False),
            (404, ErrorCode.NOT_FOUND, False),
            (409, ErrorCode.HTTP_ERROR, False),
            (429, ErrorCode.RATE_LIMITED, True),
            (502, ErrorCode.HTTP_ERROR, True),
        ],
    )
    async def test_status_mapping(self, status: int, code: ErrorCode, recoverable: bool) -> None:
        recorder = Recorder(status=status, json={"error": "nope"})
        with pytest.raises(TransportError) as exc_info:
            await http_transport(recorder).send(RequestConfig(url="/api/volume/1"))

        error = exc_info.value
        assert error.code == code
        assert error.status == status
        assert error.recoverable is recoverable
        assert error.response is not None
        assert error.response.data == {"error": "nope"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("exc_type", "code"),
        [(httpx.ConnectError, ErrorCode.NETWORK_ERROR), (httpx.ReadTimeout, ErrorCode.TIMEOUT)],
    )
    async def test_network_failures(self, exc_type: type[httpx.HTTPError], code: ErrorCode) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise exc_type("boom", request=request)

        with pytest.raises(TransportError) as exc_info:
            await http_transport(handler).send(RequestConfig(url="/api/volume/1"))
        assert exc_info.value.code == code
        assert exc_info.value.recoverable
        assert isinstance(exc_info.value.__cause__, exc_type)

    @pytest.mark.asyncio
    async def test_borrowed_client_left_open(self) -> None:
        client = httpx.AsyncClient(transport=httpx.MockTransport(Recorder(json={})))
        async with HttpxTransport(HttpSettings(), client=client):
            pass
        assert not client.is_closed
        await client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_closed(self) -> None:
        async with HttpxTransport(HttpSettings(), base_url=BASE_URL) as transport:
            client = transport._get_client()
        assert client.is_closed

    @pytest.mark.asyncio
    async def test_resource_over_http(self) -> None:
        recorder = Recorder(json={"id": 7, "name": "X"})
        transport = http_transport(recorder)
        Volume = ResourceFactory(transport, CacheStore(lambda name: MemoryResourceCache()))(
            "volume", "/api/volume/:id", {"id": "@id"},
        )

        assert await Volume.get({"id": 7}) == {"id": 7, "name": "X"}
        assert await Volume.get({"id": 7}) == {"id": 7, "name": "X"}
        assert len(recorder.requests) == 1
        assert str(recorder.last.url) == "https://api.test/api/volume/7"


# ─────────────────────────────────────────────────────────────────────────────
# MockTransport
# ─────────────────────────────────────────────────────────────────────────────


class TestMockTransport:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(MockTransport(), Transport)
        assert isinstance(HttpxTransport(HttpSettings()), Transport)

    @pytest.mark.asyncio
    async def test_records_invocations(self) -> None:
        transport = MockTransport().respond("get", "/a", {"ok": True}, headers={"ETag": "x"})
        reply = await transport.send(RequestConfig(url="/a"))

        assert reply.data == {"ok": True}
        assert reply.header("etag") == "x"
        assert transport.call_count == 1
        assert transport.last_call is not None
        assert transport.last_call.response is reply
        transport.assert_called_with(method="GET", url="/a")
        with pytest.raises(AssertionError):
            transport.assert_called_with(url="/b")
        with pytest.raises(AssertionError):
            transport.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_route_is_404(self) -> None:
        transport = MockTransport()
        with pytest.raises(TransportError) as exc_info:
            await transport.send(RequestConfig(url="/missing"))
        assert exc_info.value.status == 404
        assert transport.last_call is not None
        assert transport.last_call.exception is exc_info.value

    @pytest.mark.asyncio
    async def test_side_effect(self) -> None:
        transport = MockTransport(side_effect=lambda config: {"echo": config.url})
        reply = await transport.send(RequestConfig(url="/x"))
        assert reply == TransportResponse(data={"echo": "/x"})

    @pytest.mark.asyncio
    async def test_fail_raises_given_exception(self) -> None:
        transport = MockTransport().fail("GET", "/a", ConnectionResetError("reset"))
        with pytest.raises(ConnectionResetError):
            await transport.send(RequestConfig(url="/a"))

    def test_assert_called_on_fresh_mock(self) -> None:
        transport = MockTransport()
        transport.assert_not_called()
        with pytest.raises(AssertionError):
            transport.assert_called()
