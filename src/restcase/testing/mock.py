"""In-memory transport for testing resource classes.

Provides MockTransport for:
- Canned replies per method + url
- Simulating HTTP and network failures
- Recording requests for verification
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Self

from restcase.errors import TransportError
from restcase.transport import RequestConfig, TransportResponse


@dataclass(slots=True)
class Invocation:
    """Record of a single request."""
    config: RequestConfig
    response: TransportResponse | None = None
    exception: Exception | None = None


@dataclass
class MockTransport:
    """Transport replaying canned responses and recording every request.

    Example:
        >>> transport = MockTransport().respond("GET", "/api/volume/7", {"id": 7})
        >>> Volume = ResourceFactory(transport)("volume", "/api/volume/:id")
        >>> await Volume.get({"id": 7})
        >>> transport.assert_called_with(method="GET", url="/api/volume/7")
    """

    replies: dict[tuple[str, str], TransportResponse | Exception] = field(default_factory=dict)
    invocations: list[Invocation] = field(default_factory=list)
    side_effect: Callable[[RequestConfig], Any] | None = None
    delay: float = 0.0

    def respond(
        self,
        method: str,
        url: str,
        data: Any = None,
        *,
        status: int = 200,
        headers: dict[str, str] | None = None,
    ) -> Self:
        self.replies[(method.upper(), url)] = TransportResponse(status=status, headers=headers or {}, data=data)
        return self

    def fail(self, method: str, url: str, exc: Exception) -> Self:
        self.replies[(method.upper(), url)] = exc
        return self

    @property
    def call_count(self) -> int:
        return len(self.invocations)

    @property
    def called(self) -> bool:
        return self.call_count > 0

    @property
    def last_call(self) -> Invocation | None:
        return self.invocations[-1] if self.invocations else None

    def assert_called(self) -> None:
        if not self.called:
            raise AssertionError("Expected transport to be called")

    def assert_not_called(self) -> None:
        if self.called:
            raise AssertionError(f"Transport called {self.call_count} times")

    def assert_called_with(self, **kwargs: object) -> None:
        if not self.called:
            raise AssertionError("Expected transport to be called")
        last = self.last_call
        assert last is not None
        for key, expected in kwargs.items():
            actual = getattr(last.config, key)
            if actual != expected:
                raise AssertionError(f"'{key}': expected {expected!r}, got {actual!r}")

    def _reply(self, config: RequestConfig) -> TransportResponse | Exception:
        if self.side_effect is not None:
            result = self.side_effect(config)
            return result if isinstance(result, (TransportResponse, Exception)) else TransportResponse(data=result)
        return self.replies.get((config.method, config.url), TransportResponse(status=404))

    async def send(self, config: RequestConfig) -> TransportResponse:
        invocation = Invocation(config=config)
        self.invocations.append(invocation)
        if self.delay:
            await asyncio.sleep(self.delay)
        else:
            await asyncio.sleep(0)

        reply = self._reply(config)
        if isinstance(reply, Exception):
            invocation.exception = reply
            raise reply
        invocation.response = reply
        if not reply.is_success:
            error = TransportError.from_response(reply)
            invocation.exception = error
            raise error
        return reply
