"""Action descriptors: a named verb bound to an HTTP method and a response shape."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from restcase.transport import BODY_METHODS


class Interceptor(BaseModel):
    """Outcome hooks run after cache/network resolution.

    ``response`` turns the pipeline :class:`~restcase.resource.Response` into the
    value handed to ``on_success`` and the awaiting caller (default: the
    resource). ``response_error`` receives the failure; whatever it returns
    becomes the result, and raising keeps the call failed.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    response: Callable[..., Any] | None = None
    response_error: Callable[..., Any] | None = Field(default=None, alias="responseError")


class Action(BaseModel):
    """Declaration of one resource action.

    Attributes:
        method: HTTP method; POST/PUT/PATCH attach the payload as body
        is_array: Whether the response is a list (alias ``isArray``)
        params: Parameter spec merged over the factory defaults
        url: Template overriding the resource template for this action
        interceptor: Response/error hooks
        headers: Extra request headers
        timeout: Request timeout override in seconds
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    method: str = "GET"
    is_array: bool = Field(default=False, alias="isArray")
    params: dict[str, Any] = Field(default_factory=dict)
    url: str | None = None
    interceptor: Interceptor = Field(default_factory=Interceptor)
    headers: dict[str, str] = Field(default_factory=dict)
    timeout: Annotated[float, Field(gt=0)] | None = None

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    @computed_field
    @property
    def has_body(self) -> bool:
        return self.method in BODY_METHODS

    @classmethod
    def coerce(cls, value: Action | Mapping[str, Any]) -> Action:
        return value if isinstance(value, Action) else cls.model_validate(value)


DEFAULT_ACTIONS: Mapping[str, Action] = {
    "get": Action(method="GET"),
    "save": Action(method="POST"),
    "query": Action(method="GET", is_array=True),
    "remove": Action(method="DELETE"),
    "delete": Action(method="DELETE"),
}
