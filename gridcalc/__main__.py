"""CLI for the gridcalc expression evaluator.

Usage:
    python -m gridcalc eval "2+3x4"                   # Single expression
    python -m gridcalc eval "5!" "7//2" "sqrt(-1)"    # Table of results
    python -m gridcalc eval --json "2^3^2"            # Machine-readable output
    python -m gridcalc eval --mode real -- "-1!"      # Real-only arithmetic
    python -m gridcalc repl                           # Line-by-line calculator
    python -m gridcalc functions                      # Show functions/constants
"""

from __future__ import annotations

import json
import logging
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from gridcalc.display import format_outcome, render_registry, render_results
from gridcalc.evaluator import evaluate
from gridcalc.models import NumberMode
from gridcalc.settings import Settings

app = typer.Typer(
    name="gridcalc",
    help="Calculator with real and complex expression evaluation",
    no_args_is_help=True,
)
console = Console(stderr=True)
out = Console(highlight=False)

_QUIT_WORDS = ("q", "quit", "exit")
_CLEAR_WORDS = ("c", "clear")


def _configure_logging(level: str) -> None:
    """Send gridcalc's log records to stderr through Rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _resolve_settings(mode: Optional[str], max_depth: Optional[int], verbose: bool) -> Settings:
    """Environment settings with the command-line options applied on top."""
    number_mode = None
    if mode:
        try:
            number_mode = NumberMode(mode.lower())
        except ValueError:
            console.print(f"[red]Invalid mode: {mode}[/red]. Choose: real, complex")
            raise typer.Exit(1)
    settings = Settings.from_env().with_overrides(
        mode=number_mode,
        max_depth=max_depth,
        log_level="DEBUG" if verbose else None,
    )
    _configure_logging(settings.log_level)
    return settings


@app.command("eval")
def cmd_eval(
    expressions: list[str] = typer.Argument(help="Expression(s) to evaluate, e.g. '2+3x4'"),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="Mode: real, complex"),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", min=1, help="Nesting limit"),
    json_output: bool = typer.Option(False, "--json", help="Print results as JSON records"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log evaluation failures"),
) -> None:
    """Evaluate one or more expressions."""
    settings = _resolve_settings(mode, max_depth, verbose)
    outcomes = [evaluate(text, settings=settings) for text in expressions]

    if json_output:
        typer.echo(json.dumps([o.to_dict() for o in outcomes], indent=2, allow_nan=False))
    elif len(outcomes) == 1:
        out.print(format_outcome(outcomes[0], settings.epsilon), markup=False)
    else:
        render_results(outcomes, out, settings.epsilon)

    if not all(o.ok for o in outcomes):
        raise typer.Exit(1)


@app.command("repl")
def cmd_repl(
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="Mode: real, complex"),
    max_depth: Optional[int] = typer.Option(None, "--max-depth", min=1, help="Nesting limit"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log evaluation failures"),
) -> None:
    """Read expressions line by line and print each result."""
    settings = _resolve_settings(mode, max_depth, verbose)
    console.print(
        f"[bold]gridcalc[/bold] ({settings.mode.value} mode). "
        "Multiply with 'x'. 'C' clears, 'q' quits."
    )

    while True:
        try:
            line = out.input("> ")
        except (EOFError, KeyboardInterrupt):
            break
        text = line.strip()
        if not text:
            continue
        if text.lower() in _QUIT_WORDS:
            break
        if text.lower() in _CLEAR_WORDS:
            out.clear()
            continue

        outcome = evaluate(text, settings=settings)
        style = "green" if outcome.ok else "red"
        out.print(format_outcome(outcome, settings.epsilon), style=style, markup=False)


@app.command("functions")
def cmd_functions(
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help="Mode: real, complex"),
) -> None:
    """Show the functions and constants an expression may use."""
    settings = _resolve_settings(mode, None, False)
    render_registry(settings.mode, out)


if __name__ == "__main__":
    app()
