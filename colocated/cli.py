"""Command line tools for inspecting declared documents."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.syntax import Syntax

from colocated.config import Settings, load_settings
from colocated.documents import Part
from colocated.errors import ColocatedError
from colocated.logging import configure_logging
from colocated.rendering import render_query, render_types
from colocated.session import Session

console = Console()
err_console = Console(stderr=True)


def load_document(target: str) -> Part:
    """Import ``module:attribute`` and return the document it names."""
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise click.BadParameter(f"expected MODULE:ATTRIBUTE, got {target!r}")

    if "" not in sys.path and str(Path.cwd()) not in sys.path:
        sys.path.insert(0, str(Path.cwd()))

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"cannot import {module_name}: {e}") from e

    node = module
    for part in attr.split("."):
        try:
            node = getattr(node, part)
        except AttributeError as e:
            raise click.BadParameter(f"{module_name} has no attribute {attr}") from e

    if not isinstance(node, Part):
        raise click.BadParameter(f"{target} is a {type(node).__name__}, not a document")
    return node


@click.group()
@click.option("--config", "-c", "config_path", type=click.Path(), default=None, help="YAML settings file")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """Render colocated GraphQL documents."""
    try:
        settings = load_settings(config_path)
    except ColocatedError as e:
        err_console.print(str(e), style="red", markup=False)
        ctx.exit(2)
    configure_logging(
        level="DEBUG" if verbose else settings.log_level,
        json_format=settings.json_logs,
    )
    ctx.obj = settings


@cli.command()
@click.argument("target")
@click.option("--visible", "visible", multiple=True, help="Mark a lazy fragment visible (repeatable)")
@click.option("--types", "for_types", is_flag=True, help="Print the exhaustive document used for types")
@click.option("--types-dir", type=click.Path(file_okay=False), default=None, help="Write the exhaustive document here")
@click.option("--plain", is_flag=True, help="Print without syntax highlighting")
@click.pass_obj
def render(
    settings: Settings,
    target: str,
    visible: tuple[str, ...],
    for_types: bool,
    types_dir: str | None,
    plain: bool,
) -> None:
    """Print the document rendered for TARGET (MODULE:ATTRIBUTE)."""
    node = load_document(target)

    if types_dir is not None:
        settings = settings.model_copy(update={"types_dir": Path(types_dir), "production": False})

    try:
        with Session(settings) as session:
            for name in visible:
                session.registry.set_visible(name, True)
            if for_types:
                rendered = render_types(node, settings=settings)
                if session.types_writer is not None:
                    session.types_writer.write(rendered)
            else:
                rendered = render_query(
                    node,
                    session.registry.snapshot(),
                    settings=settings,
                    types_writer=session.types_writer,
                )
            types_writer = session.types_writer
    except ColocatedError as e:
        err_console.print(e.format_verbose(), style="red", markup=False)
        sys.exit(1)

    if plain:
        click.echo(rendered.query)
    else:
        console.print(Syntax(rendered.query, "graphql", theme="ansi_dark"))

    if types_writer is not None and not settings.production:
        path = types_writer.path_for(rendered.operation_name)
        err_console.print(f"[dim]types document: {path}[/dim]")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
