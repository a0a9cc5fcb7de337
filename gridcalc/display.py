"""Result formatting and Rich rendering for the gridcalc CLI.

Values render like the calculator's result line: ``%g`` for reals, and
``a+bi`` for complex values whose imaginary part is not negligible.
"""

from __future__ import annotations

from typing import Iterable

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from gridcalc.arithmetic import DEFAULT_EPSILON, arithmetic_for
from gridcalc.models import EvaluationOutcome, Number, NumberMode


def format_value(value: Number, epsilon: float = DEFAULT_EPSILON) -> str:
    """Format a result the way the calculator displays it.

    >>> format_value(14.0)
    '14'
    >>> format_value(complex(1, 2))
    '1+2i'
    """
    if not isinstance(value, complex):
        return f"{value:g}"
    if abs(value.imag) <= epsilon:
        return f"{value.real:g}"
    sign = "-" if value.imag < 0 else "+"
    return f"{value.real:g}{sign}{abs(value.imag):g}i"


def format_outcome(outcome: EvaluationOutcome, epsilon: float = DEFAULT_EPSILON) -> str:
    """Value string on success, ``Error: ...`` on failure."""
    if outcome.error is not None:
        return f"Error: {outcome.error}"
    return format_value(outcome.value, epsilon)


def render_results(
    outcomes: Iterable[EvaluationOutcome],
    console: Console,
    epsilon: float = DEFAULT_EPSILON,
) -> None:
    """Render a Rich table of expression / result / status rows."""
    table = Table(title="Results", show_header=True, header_style="bold")
    table.add_column("Expression", style="cyan", min_width=12)
    table.add_column("Result", justify="right", min_width=12)
    table.add_column("Status", justify="center")

    for outcome in outcomes:
        if outcome.ok:
            result = escape(format_value(outcome.value, epsilon))
            status = "[green]ok[/green]"
        else:
            result = f"[red]{escape(outcome.error.message)}[/red]"
            status = f"[red]{outcome.error.kind.value}[/red]"
        table.add_row(escape(outcome.text), result, status)

    console.print()
    console.print(table)
    console.print()


def render_registry(mode: NumberMode, console: Console) -> None:
    """Render the functions and constants available in a mode."""
    arith = arithmetic_for(mode)

    functions = Table(title=f"Functions ({mode.value})", show_header=True, header_style="bold")
    functions.add_column("Name", style="green", min_width=8)
    functions.add_column("Arity", justify="right")
    functions.add_column("Description", min_width=24)
    for function in sorted(arith.functions.values(), key=lambda f: f.name):
        functions.add_row(function.name, str(function.arity), function.description)

    constants = Table(title=f"Constants ({mode.value})", show_header=True, header_style="bold")
    constants.add_column("Name", style="green", min_width=8)
    constants.add_column("Value", justify="right")
    for name, value in arith.constants.items():
        constants.add_row(name, format_value(value))

    console.print()
    console.print(functions)
    console.print(constants)
    console.print()
