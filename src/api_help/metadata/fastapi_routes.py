"""FastAPI discovery — converts an application's registered routes into endpoint groups."""

import inspect
import logging
import typing
from typing import Any
from uuid import UUID

from fastapi import FastAPI, params
from fastapi.dependencies.models import Dependant
from fastapi.routing import APIRoute
from starlette.routing import Route

from api_help.metadata.base import (
    ControllerEndpoint,
    EndpointGroup,
    GenericEndpoint,
    Parameter,
    ParamSource,
)
from api_help.resolver import declared_return_type

logger = logging.getLogger(__name__)

DEFAULT_GROUP = "default"
STATE_ATTRIBUTE = "api_help_groups"

_FIELD_SOURCES = (
    ("path_params", ParamSource.PATH),
    ("query_params", ParamSource.QUERY),
    ("header_params", ParamSource.HEADER),
    ("cookie_params", ParamSource.COOKIE),
    ("body_params", ParamSource.BODY),
)

# Dependant attributes naming framework-provided handler arguments.
_SPECIAL_PARAM_ATTRIBUTES = (
    "request_param_name",
    "websocket_param_name",
    "http_connection_param_name",
    "response_param_name",
    "background_tasks_param_name",
    "security_scopes_param_name",
)

_CONVERTOR_TYPES = {
    "IntegerConvertor": int,
    "FloatConvertor": float,
    "UUIDConvertor": UUID,
}


def groups_for(app: FastAPI) -> list[EndpointGroup]:
    """Endpoint groups of ``app``, collected on first use and kept on ``app.state``."""
    groups = getattr(app.state, STATE_ATTRIBUTE, None)
    if groups is None:
        groups = collect_groups(app)
        setattr(app.state, STATE_ATTRIBUTE, groups)
    return groups


def collect_groups(app: Any) -> list[EndpointGroup]:
    """Group the routes of ``app`` (or any router) by their first tag.

    Groups keep the order in which their first route was registered.
    """
    grouped: dict[str, list] = {}
    for route in app.routes:
        if not getattr(route, "include_in_schema", False):
            logger.debug("Skipping route %r", getattr(route, "path", route))
            continue
        if isinstance(route, APIRoute):
            tag = route.tags[0] if route.tags else DEFAULT_GROUP
            endpoints = _controller_endpoints(route)
        elif isinstance(route, Route):
            tag = DEFAULT_GROUP
            endpoints = _generic_endpoints(route)
        else:
            logger.debug("Skipping unsupported route type %s", type(route).__name__)
            continue
        grouped.setdefault(str(tag), []).extend(endpoints)

    return [EndpointGroup(name=name, endpoints=endpoints) for name, endpoints in grouped.items()]


def _http_methods(route: Route) -> list[str]:
    methods = {m.upper() for m in (route.methods or ())}
    # Starlette adds HEAD to every GET route.
    if "GET" in methods:
        methods.discard("HEAD")
    return sorted(methods)


def _controller_endpoints(route: APIRoute) -> list[ControllerEndpoint]:
    parameters = _route_parameters(route)
    supported = _supported_response_types(route)
    display_name = _display_name(route.endpoint)
    return [
        ControllerEndpoint(
            http_method=method,
            relative_path=route.path,
            display_name=display_name,
            parameters=parameters,
            handler=route.endpoint,
            supported_response_types=supported,
        )
        for method in _http_methods(route)
    ]


def _generic_endpoints(route: Route) -> list[GenericEndpoint]:
    parameters = [
        Parameter(
            name=name,
            source=ParamSource.PATH,
            type=_CONVERTOR_TYPES.get(type(convertor).__name__, str),
        )
        for name, convertor in route.param_convertors.items()
    ]
    return [
        GenericEndpoint(
            http_method=method,
            relative_path=route.path,
            display_name=route.name,
            parameters=parameters,
        )
        for method in _http_methods(route)
    ]


def _display_name(func: Any) -> str:
    module = getattr(func, "__module__", "?")
    name = getattr(func, "__qualname__", getattr(func, "__name__", "?"))
    return f"{module}.{name}"


def _supported_response_types(route: APIRoute) -> list[Any]:
    supported = []
    if route.response_model is not None:
        supported.append(route.response_model)
    for response in (route.responses or {}).values():
        model = response.get("model") if isinstance(response, dict) else None
        if model is not None and model not in supported:
            supported.append(model)
    return supported


def _route_parameters(route: APIRoute) -> list[Parameter]:
    """Handler parameters in declaration order, followed by those of sub-dependencies."""
    handler = route.endpoint
    hints = _type_hints(handler)
    try:
        order = {name: i for i, name in enumerate(inspect.signature(handler).parameters)}
    except (TypeError, ValueError):
        order = {}

    collected: list[tuple[str, Parameter]] = []
    seen: set[tuple[str, ParamSource]] = set()

    for python_name, parameter in _request_parameters(route.dependant):
        if (parameter.name, parameter.source) in seen:
            continue
        seen.add((parameter.name, parameter.source))
        collected.append((python_name, parameter))

    for attribute in _SPECIAL_PARAM_ATTRIBUTES:
        name = getattr(route.dependant, attribute, None)
        if name:
            collected.append((name, Parameter(name=name, source=ParamSource.SPECIAL, type=hints.get(name))))

    for sub in route.dependant.dependencies:
        if sub.name:
            collected.append((sub.name, Parameter(name=sub.name, source=ParamSource.SERVICES, type=_dependency_type(sub))))

    collected.sort(key=lambda item: order.get(item[0], len(order)))
    return [parameter for _, parameter in collected]


def _request_parameters(dependant: Dependant):
    """Yield ``(python_name, Parameter)`` for request-bound fields of ``dependant`` and its sub-dependencies."""
    for attribute, source in _FIELD_SOURCES:
        for field in getattr(dependant, attribute):
            if source is ParamSource.BODY and isinstance(field.field_info, params.Form):
                field_source = ParamSource.FORM
            else:
                field_source = source
            yield field.name, Parameter(
                name=field.alias or field.name,
                source=field_source,
                type=field.field_info.annotation,
            )
    for sub in dependant.dependencies:
        yield from _request_parameters(sub)


def _dependency_type(dependant: Dependant) -> Any:
    call = dependant.call
    if inspect.isclass(call):
        return call
    return declared_return_type(call)


def _type_hints(func: Any) -> dict[str, Any]:
    try:
        return typing.get_type_hints(func, include_extras=True)
    except Exception as e:  # NameError, TypeError from unresolvable annotations
        logger.debug("Cannot resolve annotations of %r: %s", func, e)
        return {}
