"""Document assembler — renders endpoint groups into the help document."""

import logging
from typing import Any, Iterable

from api_help.introspection.classifier import is_primitive
from api_help.introspection.docstring import SummaryLookup, summary_for
from api_help.introspection.scaffold import scaffold
from api_help.introspection.schema import schema
from api_help.metadata.base import ControllerEndpoint, EndpointGroup, GenericEndpoint
from api_help.options import ApiHelpOptions, LoadingPolicy
from api_help.resolver import RequestParameter, resolve_request, resolve_response

logger = logging.getLogger(__name__)

Document = dict[str, Any]


class DocumentAssembler:
    """Builds the bulk listing and targeted lookups for a set of endpoint groups."""

    def __init__(self, options: ApiHelpOptions | None = None, summary_lookup: SummaryLookup = summary_for):
        self.options = options or ApiHelpOptions()
        self.summary_lookup = summary_lookup

    def assemble(self, groups: Iterable[EndpointGroup]) -> Document:
        """One entry per group, expanded or listed according to the loading policy."""
        document: Document = {}
        for group in groups:
            if group.name in document:
                logger.warning("Duplicate endpoint group %r, keeping the first", group.name)
                continue
            document[group.name] = self._render_group(group)
        return document

    def lookup(
        self,
        groups: Iterable[EndpointGroup],
        relative_path: str | None,
        http_method: str | None = None,
    ) -> Document:
        """Fully expand the endpoints matching ``relative_path`` (and ``http_method`` if given).

        Always expands, whatever the loading policy.
        """
        if relative_path is None:
            return {}
        method = http_method.upper() if http_method else None
        matches = [
            endpoint
            for group in groups
            for endpoint in group.endpoints
            if endpoint.relative_path == relative_path
            and (method is None or endpoint.http_method.upper() == method)
        ]
        return self._render_endpoints(matches)

    def render_endpoint(self, endpoint: ControllerEndpoint | GenericEndpoint) -> Document:
        return {
            "Summary": self._summary(endpoint),
            "Request": self._render_request(endpoint),
            "Response": self._render_response(endpoint),
        }

    def _render_group(self, group: EndpointGroup) -> Document | list[str]:
        if self.options.loading_policy is LoadingPolicy.LAZY:
            keys: list[str] = []
            for endpoint in group.endpoints:
                if endpoint.key not in keys:
                    keys.append(endpoint.key)
            return keys
        return self._render_endpoints(group.endpoints)

    def _render_endpoints(self, endpoints: Iterable[ControllerEndpoint | GenericEndpoint]) -> Document:
        document: Document = {}
        for endpoint in endpoints:
            if endpoint.key in document:
                logger.warning("Duplicate endpoint %r, keeping the first", endpoint.key)
                continue
            document[endpoint.key] = self.render_endpoint(endpoint)
        return document

    def _summary(self, endpoint: ControllerEndpoint | GenericEndpoint) -> str:
        if isinstance(endpoint, ControllerEndpoint):
            return self.summary_lookup(endpoint.handler) or endpoint.display_name
        return endpoint.display_name

    def _render_request(self, endpoint: ControllerEndpoint | GenericEndpoint) -> Document:
        return {param.name: _render_parameter(param) for param in resolve_request(endpoint)}

    def _render_response(self, endpoint: ControllerEndpoint | GenericEndpoint) -> Document:
        node = resolve_response(endpoint)
        if node is None:
            return {"Data": None, "Schema": None}
        return {"Data": scaffold(node), "Schema": schema(node)}


def _render_parameter(param: RequestParameter) -> Document:
    rendered: Document = {"Source": param.source.value, "Data": scaffold(param.node)}
    # Primitives describe themselves through their example.
    if not is_primitive(param.node.type):
        rendered["Schema"] = schema(param.node)
    return rendered
