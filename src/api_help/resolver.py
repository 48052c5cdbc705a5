"""Endpoint resolver — effective request parameters and response type of an endpoint."""

import inspect
import logging
import typing
from typing import Any, NamedTuple

from api_help.introspection.classifier import Collection, NoData, ResultContainer, Wrapper, describe
from api_help.introspection.node import TypeNode
from api_help.metadata.base import ControllerEndpoint, GenericEndpoint, ParamSource

logger = logging.getLogger(__name__)


class RequestParameter(NamedTuple):
    name: str
    source: ParamSource
    node: TypeNode


def resolve_request(endpoint: ControllerEndpoint | GenericEndpoint) -> list[RequestParameter]:
    """Parameters bound from the request, in declaration order."""
    return [
        RequestParameter(p.name, p.source, TypeNode(p.type))
        for p in endpoint.parameters
        if p.is_from_request
    ]


def resolve_response(endpoint: ControllerEndpoint | GenericEndpoint) -> TypeNode | None:
    """The response payload type of ``endpoint``, or ``None`` when it declares no data."""
    return _RESOLVERS[endpoint.kind](endpoint)


def _resolve_controller(endpoint: ControllerEndpoint) -> TypeNode | None:
    # Only user data types are documented; void, bare awaitables and
    # response objects declare no data. Untyped handlers use the route's
    # declared response model.
    declared = declared_return_type(endpoint.handler)
    description = describe(declared)
    if isinstance(description, Wrapper):
        declared = description.inner
        description = describe(declared)

    if isinstance(description, ResultContainer):
        return _first_supported(endpoint)
    if _is_untyped(declared, description) and endpoint.supported_response_types:
        return _first_supported(endpoint)
    if isinstance(description, NoData):
        return None
    return TypeNode(declared)


def _is_untyped(declared: Any, description: Any) -> bool:
    """True for a missing or ``Any`` annotation and for bare containers such as ``dict``."""
    if declared is inspect.Signature.empty or declared is Any:
        return True
    return isinstance(description, Collection) and description.element is None


def _resolve_generic(endpoint: GenericEndpoint) -> TypeNode | None:
    return _first_supported(endpoint)


def _first_supported(endpoint: ControllerEndpoint | GenericEndpoint) -> TypeNode | None:
    if endpoint.supported_response_types:
        return TypeNode(endpoint.supported_response_types[0])
    return None


_RESOLVERS = {
    "controller": _resolve_controller,
    "generic": _resolve_generic,
}


def declared_return_type(handler: Any) -> Any:
    """Return annotation of ``handler`` with forward references resolved where possible."""
    if handler is None:
        return None
    try:
        hints = typing.get_type_hints(handler, include_extras=True)
    except Exception as e:  # NameError, TypeError from unresolvable annotations
        logger.debug("Cannot resolve annotations of %r: %s", handler, e)
        hints = {}
    if "return" in hints:
        return hints["return"]
    try:
        return inspect.signature(handler).return_annotation
    except (TypeError, ValueError):
        return None
