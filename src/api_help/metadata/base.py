"""Neutral endpoint metadata consumed by the documentation engine.

Host adapters (see ``api_help.metadata.fastapi_routes``) convert the routes a web
framework registered into these models; everything downstream works only
with them.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class ParamSource(str, Enum):
    """Where a parameter's value comes from."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"
    BODY = "body"
    FORM = "form"
    SERVICES = "services"  # injected dependencies
    SPECIAL = "special"  # framework objects (request, response, background tasks)

    @property
    def is_from_request(self) -> bool:
        return self not in (ParamSource.SERVICES, ParamSource.SPECIAL)


class Parameter(BaseModel):
    """A single endpoint parameter."""

    model_config = ConfigDict(frozen=True)

    name: str
    source: ParamSource
    type: Any = None  # declared Python type
    from_request: bool | None = None  # None: decided by source

    @property
    def is_from_request(self) -> bool:
        if self.from_request is None:
            return self.source.is_from_request
        return self.from_request


class _EndpointBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    http_method: str  # GET / POST / PUT / DELETE / PATCH
    relative_path: str  # /orders/{id}
    display_name: str = ""
    parameters: list[Parameter] = []
    supported_response_types: list[Any] = []

    @property
    def key(self) -> str:
        return f"{self.http_method} {self.relative_path}"


class ControllerEndpoint(_EndpointBase):
    """An endpoint backed by a known Python handler."""

    kind: Literal["controller"] = "controller"
    handler: Any


class GenericEndpoint(_EndpointBase):
    """An endpoint whose handler is unknown; only declared response types are available."""

    kind: Literal["generic"] = "generic"


Endpoint = Annotated[Union[ControllerEndpoint, GenericEndpoint], Field(discriminator="kind")]


class EndpointGroup(BaseModel):
    """Endpoints sharing a grouping key (e.g. a tag)."""

    model_config = ConfigDict(frozen=True)

    name: str
    endpoints: list[Endpoint] = []
