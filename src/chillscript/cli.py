"""
chill-script CLI.

Non-interactive commands for inspecting and running expressions:

- tokens: Show the token stream for a source string
- parse: Show the AST (debug labels and spans)
- eval: Evaluate a source string against --set bindings and --import namespaces
"""

from __future__ import annotations

import logging
import os
import platform
import sys
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from chillscript._version import get_version
from chillscript.core.config import ScriptSettings, load_settings
from chillscript.core.errors import ChillScriptError
from chillscript.script import ChillScriptRuntime, evaluate_source, parse, tokenize
from chillscript.script.expressions import Expression
from chillscript.script.values import format_value

app = typer.Typer(
    help="chill-script - parse and evaluate expressions",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"chill-script version {get_version()}")
        python = f"{platform.python_implementation()} {platform.python_version()}"
        typer.echo(f"  Python:        {python}")
        typer.echo(f"  Platform:      {platform.system()} {platform.release()}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    if verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, os.getenv("LOG_LEVEL", "WARNING").upper(), logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _settings(ctx: typer.Context) -> ScriptSettings:
    settings = ctx.obj if isinstance(ctx.obj, ScriptSettings) else None
    return settings if settings is not None else ScriptSettings()


def _report(error: ChillScriptError) -> NoReturn:
    err_console.print(f"[red]{escape(str(error))}[/red]")
    raise typer.Exit(code=1)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log parser and evaluator activity"),
    config: Path | None = typer.Option(  # noqa: B008
        None, "--config", "-c", help="Settings file (default: ./chill.toml if present)"
    ),
) -> None:
    """chill-script CLI main callback for global options."""
    _configure_logging(verbose)
    try:
        ctx.obj = load_settings(config)
    except ChillScriptError as e:
        _report(e)


@app.command(name="tokens")
def tokens_command(source: str = typer.Argument(..., help="Script source text")) -> None:
    """Show the token stream for SOURCE."""
    try:
        tokens = tokenize(source)
    except ChillScriptError as e:
        _report(e)

    table = Table(title="Tokens")
    table.add_column("Type", style="cyan")
    table.add_column("Value")
    table.add_column("Line:Col", justify="right")
    table.add_column("Offset", justify="right")
    for token in tokens:
        table.add_row(
            token.type.name,
            escape(repr(token.value)),
            f"{token.line}:{token.column}",
            f"{token.offset}-{token.end_offset}",
        )
    console.print(table)


def _build_tree(node: Expression, branch: Tree | None = None) -> Tree:
    span = node.span
    where = f" [dim]{span.start}-{span.end}[/dim]" if span else ""
    label = f"{escape(node.debug_label)}{where}"
    child_branch = Tree(label) if branch is None else branch.add(label)
    for child in node.children:
        _build_tree(child, child_branch)
    return child_branch


@app.command(name="parse")
def parse_command(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Script source text"),
    rule: str = typer.Option("expression", "--rule", "-r", help="Start rule name"),
) -> None:
    """Show the syntax tree for SOURCE."""
    try:
        expression = parse(source, rule, settings=_settings(ctx))
    except ChillScriptError as e:
        _report(e)
    console.print(_build_tree(expression))


@app.command(name="eval")
def eval_command(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Script source text"),
    bindings: list[str] = typer.Option(  # noqa: B008
        [], "--set", "-s", help="Bind NAME=EXPRESSION before evaluating (repeatable)"
    ),
    imports: list[str] = typer.Option(  # noqa: B008
        [], "--import", "-i", help="Import a namespace, e.g. 'decimal.*' (repeatable)"
    ),
    rule: str = typer.Option("expression", "--rule", "-r", help="Start rule name"),
) -> None:
    """Evaluate SOURCE and print the result."""
    settings = _settings(ctx)
    runtime = ChillScriptRuntime(settings=settings)
    try:
        for spec in imports:
            runtime.with_import(spec)
        for binding in bindings:
            name, separator, value_source = binding.partition("=")
            if not separator or not name.strip():
                err_console.print(
                    f"[red]Invalid --set '{escape(binding)}', expected NAME=VALUE[/red]"
                )
                raise typer.Exit(code=2)
            value = evaluate_source(value_source, ChillScriptRuntime(settings=settings))
            runtime.bind(name.strip(), value)
        result = evaluate_source(source, runtime, rule)
    except ChillScriptError as e:
        _report(e)
    console.print(escape(format_value(result)))


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


if __name__ == "__main__":
    main(sys.argv[1:])
