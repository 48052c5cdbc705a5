"""CLI entry point for api-help."""

import importlib
import json
import logging
from pathlib import Path
from typing import Any

import click
import yaml
from pydantic import ValidationError

from api_help.assembler import DocumentAssembler
from api_help.metadata.fastapi_routes import collect_groups
from api_help.options import ApiHelpOptions, LoadingPolicy


def _load_app(app_path: str) -> Any:
    """Import an application from a ``module:attribute`` string."""
    module_name, _, attribute = app_path.partition(":")
    if not module_name or not attribute:
        raise click.BadParameter(f"expected 'module:attribute', got {app_path!r}", param_hint="APP")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"cannot import module {module_name!r}: {e}", param_hint="APP") from e

    app = module
    for name in attribute.split("."):
        try:
            app = getattr(app, name)
        except AttributeError as e:
            raise click.BadParameter(f"{module_name!r} has no attribute {attribute!r}", param_hint="APP") from e
    if not hasattr(app, "routes"):
        raise click.BadParameter(f"{app_path!r} is not an application or router", param_hint="APP")
    return app


def _load_options(config: Path | None, policy: str | None) -> ApiHelpOptions:
    try:
        options = ApiHelpOptions.load(config)
    except (ValidationError, ValueError, yaml.YAMLError) as e:
        raise click.ClickException(f"Invalid options: {e}") from e
    if policy is not None:
        options = options.model_copy(update={"loading_policy": LoadingPolicy(policy)})
    return options


def _render(document: dict, fmt: str) -> str:
    if fmt == "yaml":
        return yaml.safe_dump(document, sort_keys=False, allow_unicode=True)
    return json.dumps(document, indent=2, ensure_ascii=False, default=str) + "\n"


def _emit(text: str, output: Path | None) -> None:
    if output is None:
        click.echo(text, nl=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    click.echo(f"Documentation saved to {output}", err=True)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """API Help — document the endpoints of a FastAPI application."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@main.command()
@click.argument("app_path", metavar="APP")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output file; prints to stdout when omitted.")
@click.option("--policy", default=None, type=click.Choice(["eager", "lazy"], case_sensitive=False), help="Loading policy for the listing.")
@click.option("--config", default=None, type=click.Path(exists=True, path_type=Path), help="YAML options file.")
@click.option("--format", "fmt", default="json", type=click.Choice(["json", "yaml"]), help="Output format.")
def dump(app_path: str, output: Path | None, policy: str | None, config: Path | None, fmt: str):
    """Write the help document for every endpoint group of APP."""
    options = _load_options(config, policy)
    app = _load_app(app_path)

    groups = collect_groups(app)
    click.echo(f"Found {sum(len(g.endpoints) for g in groups)} endpoints in {len(groups)} groups.", err=True)

    document = DocumentAssembler(options).assemble(groups)
    _emit(_render(document, fmt), output)


@main.command()
@click.argument("app_path", metavar="APP")
@click.option("--path", "relative_path", required=True, help="Relative path of the endpoint, e.g. /orders/{id}.")
@click.option("--method", "http_method", default=None, help="HTTP method; any method when omitted.")
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output file; prints to stdout when omitted.")
@click.option("--format", "fmt", default="json", type=click.Choice(["json", "yaml"]), help="Output format.")
def show(app_path: str, relative_path: str, http_method: str | None, output: Path | None, fmt: str):
    """Print the full help for the endpoints of APP matching a path."""
    app = _load_app(app_path)
    document = DocumentAssembler().lookup(collect_groups(app), relative_path, http_method)
    if not document:
        click.echo(f"No endpoint matches {relative_path!r}.", err=True)
    _emit(_render(document, fmt), output)
