"""HTTP surface: ``GET /api/help`` and ``GET /api/help/get``."""

from typing import Any

from fastapi import APIRouter, Query, Request

from api_help.assembler import DocumentAssembler
from api_help.introspection.docstring import SummaryLookup, summary_for
from api_help.metadata.fastapi_routes import groups_for
from api_help.options import ApiHelpOptions


def help_router(
    options: ApiHelpOptions | None = None,
    summary_lookup: SummaryLookup = summary_for,
    prefix: str = "/api/help",
) -> APIRouter:
    """Router documenting the application it is included in."""
    assembler = DocumentAssembler(options or ApiHelpOptions.from_env(), summary_lookup)
    router = APIRouter(prefix=prefix, tags=["Help"])

    @router.get("")
    def get_help(request: Request) -> dict[str, Any]:
        """List every endpoint group of the application."""
        return assembler.assemble(groups_for(request.app))

    @router.get("/get")
    def get_endpoint_help(
        request: Request,
        relative_path: str | None = Query(default=None, alias="relativePath"),
        http_method: str | None = Query(default=None, alias="httpMethod"),
    ) -> dict[str, Any]:
        """Describe the endpoints registered for a relative path."""
        return assembler.lookup(groups_for(request.app), relative_path, http_method)

    return router
