"""Transport contract consumed by the request pipeline."""

from __future__ import annotations

from typing import Annotated, Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

BODY_METHODS: frozenset[str] = frozenset({"POST", "PUT", "PATCH"})


class RequestConfig(BaseModel):
    """One outgoing request.

    Attributes:
        method: HTTP method (upper-cased)
        url: Resolved url, without the query string
        params: Query parameters, serialized by the transport
        data: Request body for POST/PUT/PATCH
        headers: Extra headers from the action
        timeout: Per-action timeout override in seconds
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    method: str = "GET"
    url: str
    params: dict[str, Any] = Field(default_factory=dict)
    data: Any = Field(default=None, repr=False)
    headers: dict[str, str] = Field(default_factory=dict, repr=False)
    timeout: Annotated[float, Field(gt=0)] | None = None

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    @computed_field
    @property
    def has_body(self) -> bool:
        return self.method in BODY_METHODS


class TransportResponse(BaseModel):
    """Decoded server reply."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status: Annotated[int, Field(ge=100, le=599)] = 200
    headers: dict[str, str] = Field(default_factory=dict, repr=False)
    data: Any = Field(default=None, repr=False)

    @computed_field
    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300

    def header(self, key: str) -> str | None:
        """Header value, case-insensitive."""
        key_lower = key.lower()
        return next((v for k, v in self.headers.items() if k.lower() == key_lower), None)


@runtime_checkable
class Transport(Protocol):
    """Sends a request; raises TransportError on non-2xx or network failure."""

    async def send(self, config: RequestConfig) -> TransportResponse: ...
