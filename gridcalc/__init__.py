"""gridcalc — calculator expression evaluator with real and complex arithmetic.

Parses and evaluates lines such as ``2+3x4``, ``2^3^2``, ``5!``, ``50%`` or
``root(27, 3)`` in a single recursive-descent pass. Multiplication is the
letter ``x``; ``//`` is truncating division; ``(``, ``[`` and ``{`` group.

Usage:
    python -m gridcalc eval "2+3x4"          # Evaluate from the shell
    python -m gridcalc repl                  # Interactive line mode
    python -m gridcalc functions             # Show functions and constants

    >>> from gridcalc import evaluate
    >>> evaluate("7//2").value
    (3+0j)
"""

from gridcalc.display import format_outcome, format_value
from gridcalc.evaluator import calc, evaluate
from gridcalc.models import ErrorKind, EvalError, EvaluationOutcome, NumberMode
from gridcalc.settings import Settings

__all__ = [
    "ErrorKind",
    "EvalError",
    "EvaluationOutcome",
    "NumberMode",
    "Settings",
    "calc",
    "evaluate",
    "format_outcome",
    "format_value",
]
