"""
Relationship graph CLI command.

Asks the language server for the game graph, stores the payload and the
Graphviz description, and renders an image.
"""

import asyncio
from pathlib import Path

import typer

from cgdsl.core.errors import CgdslError
from cgdsl.core.graph import GraphExportResult, export_graph

graph_app = typer.Typer(
    help="Relationship graph export (requires the language server and Graphviz).",
    no_args_is_help=True,
)


async def _run_export(target: Path, manifest: str | None) -> GraphExportResult:
    from cgdsl.cli.utils import resolve_manifest
    from cgdsl.lsp.client import LanguageSession

    try:
        project = resolve_manifest(manifest)
    except CgdslError as e:
        return GraphExportResult(ok=False, message=e.message)

    session = LanguageSession(project.server, project.project_root)
    try:
        await session.start()
    except CgdslError as e:
        return GraphExportResult(ok=False, message=e.message)

    try:
        return await export_graph(session, target, project.graph)
    finally:
        await session.stop()


@graph_app.command("export")
def graph_export(
    target: str = typer.Argument(..., help="Graph description file to write (e.g. game.dot)"),
    manifest: str | None = typer.Option(None, "--manifest", "-m", help="Path to cgdsl.toml"),
) -> None:
    """Export the relationship graph and render it with Graphviz."""
    result = asyncio.run(_run_export(Path(target), manifest))

    if result.ok:
        typer.echo(f"✓ {result.message}")
        if result.payload_path:
            typer.echo(f"  Payload: {result.payload_path}")
        if result.dot_path:
            typer.echo(f"  Graph:   {result.dot_path}")
        return

    typer.echo(f"Graph export failed: {result.message}", err=True)
    raise typer.Exit(code=1)
