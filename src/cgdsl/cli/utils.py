"""
CGDSL CLI utilities.

Shared helpers used across CLI modules.
"""

import logging
import platform
from pathlib import Path

import typer

from cgdsl.core.manifest import MANIFEST_NAME, ProjectManifest, load_manifest
from cgdsl.core.taxonomy import Taxonomy, default_taxonomy, load_taxonomy


def get_version() -> str:
    from cgdsl import __version__

    return __version__


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        python_version = platform.python_version()
        python_impl = platform.python_implementation()

        typer.echo(f"CGDSL tools   {get_version()}")
        typer.echo(f"Python        {python_version} ({python_impl})")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    # pygls logs every registered feature and message at INFO
    logging.getLogger("pygls").setLevel(logging.ERROR)


def resolve_manifest(manifest: str | None) -> ProjectManifest:
    path = Path(manifest) if manifest else Path.cwd() / MANIFEST_NAME
    return load_manifest(path)


def resolve_taxonomy(taxonomy: str | None, project: ProjectManifest | None = None) -> Taxonomy:
    """Taxonomy from --taxonomy, then the manifest, then the canonical vocabulary."""
    if taxonomy:
        return load_taxonomy(Path(taxonomy))
    if project is not None and project.grammar.taxonomy is not None:
        return load_taxonomy(project.grammar.taxonomy)
    return default_taxonomy()
