"""
Grammar CLI commands.

Build the TextMate grammar from the keyword taxonomy, verify a checked-in
grammar is current, and preview how text is highlighted.
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cgdsl.core.errors import CgdslError

grammar_app = typer.Typer(
    help="Keyword taxonomy and TextMate grammar commands.",
    no_args_is_help=True,
)

console = Console()

TAXONOMY_HELP = "Taxonomy YAML (default: manifest setting or canonical vocabulary)"
MANIFEST_HELP = "Path to cgdsl.toml (default: ./cgdsl.toml)"


def _fail(message: str) -> None:
    console.print(f"[red]{escape(message)}[/red]")
    raise typer.Exit(code=1)


@grammar_app.command("build")
def grammar_build(
    manifest: str | None = typer.Option(None, "--manifest", "-m", help=MANIFEST_HELP),
    output: str | None = typer.Option(None, "--output", "-o", help="Grammar file to write"),
    taxonomy: str | None = typer.Option(None, "--taxonomy", "-t", help=TAXONOMY_HELP),
    check: bool = typer.Option(
        False, "--check", help="Verify the grammar file is up to date instead of writing it"
    ),
) -> None:
    """Compile the taxonomy and atomically write the grammar file."""
    from cgdsl.cli.utils import resolve_manifest, resolve_taxonomy
    from cgdsl.core.grammar import compile_grammar
    from cgdsl.core.writer import check_grammar, write_grammar

    try:
        project = resolve_manifest(manifest)
        document = compile_grammar(resolve_taxonomy(taxonomy, project), project.grammar.name)
    except CgdslError as e:
        _fail(e.message)
        return
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))
        return

    target = Path(output) if output else project.grammar.output

    if check:
        if check_grammar(document, target):
            console.print(f"[green]✓ Grammar is up to date: {escape(str(target))}[/green]")
            return
        console.print(f"[red]✗ Grammar is out of date: {escape(str(target))}[/red]")
        console.print("Run: cgdsl grammar build")
        raise typer.Exit(code=1)

    try:
        write_grammar(document, target)
    except OSError as e:
        _fail(f"Failed to write grammar: {e}")
    console.print(f"[green]✓ Generated: {escape(str(target))}[/green]")


@grammar_app.command("validate")
def grammar_validate(
    manifest: str | None = typer.Option(None, "--manifest", "-m", help=MANIFEST_HELP),
    taxonomy: str | None = typer.Option(None, "--taxonomy", "-t", help=TAXONOMY_HELP),
) -> None:
    """Check the taxonomy for conflicts and shadowed literals."""
    from cgdsl.cli.utils import resolve_manifest, resolve_taxonomy
    from cgdsl.core.grammar import validate_taxonomy

    try:
        tax = resolve_taxonomy(taxonomy, resolve_manifest(manifest))
        validate_taxonomy(tax)
    except CgdslError as e:
        _fail(e.message)
        return
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))
        return

    total = len(tax.all_tokens())
    console.print(
        f"[green]✓ Taxonomy is valid: {len(tax.categories)} categories, {total} tokens[/green]"
    )


@grammar_app.command("categories")
def grammar_categories(
    manifest: str | None = typer.Option(None, "--manifest", "-m", help=MANIFEST_HELP),
    taxonomy: str | None = typer.Option(None, "--taxonomy", "-t", help=TAXONOMY_HELP),
) -> None:
    """List categories in priority order."""
    from cgdsl.cli.utils import resolve_manifest, resolve_taxonomy

    try:
        tax = resolve_taxonomy(taxonomy, resolve_manifest(manifest))
    except CgdslError as e:
        _fail(e.message)
        return
    except (FileNotFoundError, ValueError) as e:
        _fail(str(e))
        return

    table = Table(title="Keyword categories")
    table.add_column("#", justify="right", no_wrap=True)
    table.add_column("Category", style="cyan", no_wrap=True)
    table.add_column("Scope", no_wrap=True)
    table.add_column("Tokens")
    for index, category in enumerate(tax.categories, start=1):
        table.add_row(str(index), category.name, category.scope, ", ".join(category.tokens))
    console.print(table)


@grammar_app.command("tokenize")
def grammar_tokenize(
    text: str = typer.Argument(..., help="Source text to highlight"),
    manifest: str | None = typer.Option(None, "--manifest", "-m", help=MANIFEST_HELP),
    taxonomy: str | None = typer.Option(None, "--taxonomy", "-t", help=TAXONOMY_HELP),
    grammar: str | None = typer.Option(
        None, "--grammar", "-g", help="Use an existing grammar file instead of compiling"
    ),
) -> None:
    """Show the scopes the grammar assigns to TEXT."""
    from cgdsl.cli.utils import resolve_manifest, resolve_taxonomy
    from cgdsl.core.grammar import compile_grammar
    from cgdsl.core.tokenizer import tokenize
    from cgdsl.core.writer import load_grammar

    try:
        if grammar:
            document = load_grammar(Path(grammar))
        else:
            project = resolve_manifest(manifest)
            document = compile_grammar(resolve_taxonomy(taxonomy, project), project.grammar.name)
    except CgdslError as e:
        _fail(e.message)
        return
    except (FileNotFoundError, ValueError, KeyError) as e:
        _fail(str(e))
        return

    tokens = tokenize(document, text)
    if not tokens:
        typer.echo("No tokens matched.")
        return

    for token in tokens:
        suffix = "" if token.closed else "  (unterminated)"
        typer.echo(f"{token.start:>4}-{token.end:<4} {token.text!r:<24} {token.scope}{suffix}")
        for child in token.children:
            typer.echo(f"{child.start:>6}-{child.end:<4} {child.text!r:<22} {child.scope}")
