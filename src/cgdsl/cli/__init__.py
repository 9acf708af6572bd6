"""
CGDSL CLI package.

- grammar.py: grammar build, validation, and preview commands
- graph.py: relationship graph export through the language server
- utils.py: shared helpers

Entry point: ``cgdsl`` (``cgdsl.cli:main``).
"""

import typer

from cgdsl.cli.grammar import grammar_app
from cgdsl.cli.graph import graph_app
from cgdsl.cli.utils import configure_logging, get_version, version_callback

app = typer.Typer(
    help="CGDSL editor tooling: keyword taxonomy, TextMate grammar, graph export.",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    configure_logging(verbose)


app.add_typer(grammar_app, name="grammar")
app.add_typer(graph_app, name="graph")


def main(argv: list[str] | None = None) -> None:
    app(args=argv)


__all__ = ["app", "main", "get_version", "grammar_app", "graph_app"]
