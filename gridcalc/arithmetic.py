"""Numeric capability for the evaluator: real and complex arithmetic.

The grammar is written once against Arithmetic. RealArithmetic works on
floats and rejects anything that would need an imaginary part;
ComplexArithmetic works on complex values and treats magnitudes below
epsilon as zero, since floating complex arithmetic rarely lands on an
exact zero.

Every operation raises EvalError (never a bare ArithmeticError), so the
evaluator only has to stamp a cursor position on it.
"""

from __future__ import annotations

import cmath
import math
from contextlib import contextmanager
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Iterator, Mapping

from gridcalc.models import ErrorKind, EvalError, Number, NumberMode

DEFAULT_EPSILON = 1e-12


@dataclass(frozen=True)
class Function:
    """A registry entry: fixed arity plus the rule that evaluates it."""

    name: str
    arity: int
    rule: Callable[..., Number]
    description: str = ""


@contextmanager
def numeric_faults(what: str) -> Iterator[None]:
    """Translate Python's arithmetic exceptions into EvalError."""
    try:
        yield
    except ZeroDivisionError as exc:
        raise EvalError(ErrorKind.DIVISION_BY_ZERO, f"{what}: division by zero") from exc
    except OverflowError as exc:
        raise EvalError(ErrorKind.OVERFLOW, f"{what}: result out of range") from exc
    except ValueError as exc:
        raise EvalError(ErrorKind.DOMAIN_ERROR, f"{what}: argument outside the function's domain") from exc


# Unary rules shared by name; log and ln are the same natural logarithm.
_UNARY_DESCRIPTIONS: dict[str, str] = {
    "log": "natural logarithm",
    "ln": "natural logarithm",
    "cos": "cosine (radians)",
    "sin": "sine (radians)",
    "tan": "tangent (radians)",
    "arccos": "inverse cosine",
    "arcsin": "inverse sine",
    "arctan": "inverse tangent",
    "sqrt": "square root",
}

_REAL_RULES: dict[str, Callable[[float], float]] = {
    "log": math.log,
    "ln": math.log,
    "cos": math.cos,
    "sin": math.sin,
    "tan": math.tan,
    "arccos": math.acos,
    "arcsin": math.asin,
    "arctan": math.atan,
    "sqrt": math.sqrt,
}

_COMPLEX_RULES: dict[str, Callable[[complex], complex]] = {
    "log": cmath.log,
    "ln": cmath.log,
    "cos": cmath.cos,
    "sin": cmath.sin,
    "tan": cmath.tan,
    "arccos": cmath.acos,
    "arcsin": cmath.asin,
    "arctan": cmath.atan,
    "sqrt": cmath.sqrt,
}


class Arithmetic:
    """Operations the grammar needs, parameterized by a numeric type."""

    mode: NumberMode
    _rules: Mapping[str, Callable[[Number], Number]] = {}
    _constants: Mapping[str, Number] = {}

    def __init__(self, epsilon: float = DEFAULT_EPSILON) -> None:
        self.epsilon = epsilon
        functions = {
            name: Function(name, 1, self._unary(name, rule), _UNARY_DESCRIPTIONS[name])
            for name, rule in self._rules.items()
        }
        functions["root"] = Function("root", 2, self.root, "n-th root: root(x, n) = x^(1/n)")
        self.functions: Mapping[str, Function] = MappingProxyType(functions)
        self.constants: Mapping[str, Number] = MappingProxyType(dict(self._constants))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(epsilon={self.epsilon!r})"

    # -- hooks implemented per numeric type ---------------------------------

    def coerce(self, value: Number) -> Number:
        raise NotImplementedError

    def is_zero(self, value: Number) -> bool:
        raise NotImplementedError

    def _trunc_div(self, a: Number, b: Number) -> Number:
        raise NotImplementedError

    def _gamma_plus_one(self, value: Number) -> Number:
        raise NotImplementedError

    def _is_valid_factorial(self, value: Number) -> bool:
        raise NotImplementedError

    # -- operations ---------------------------------------------------------

    def magnitude(self, value: Number) -> float:
        return abs(value)

    def add(self, a: Number, b: Number) -> Number:
        return self.coerce(a + b)

    def sub(self, a: Number, b: Number) -> Number:
        return self.coerce(a - b)

    def mul(self, a: Number, b: Number) -> Number:
        return self.coerce(a * b)

    def negate(self, value: Number) -> Number:
        return self.coerce(-value)

    def percent(self, value: Number) -> Number:
        return self.coerce(value / 100.0)

    def div(self, a: Number, b: Number) -> Number:
        if self.is_zero(b):
            raise EvalError(ErrorKind.DIVISION_BY_ZERO, "division by zero")
        with numeric_faults("division"):
            return self.coerce(a / b)

    def floordiv(self, a: Number, b: Number) -> Number:
        """Truncating division: trunc(a / b), rounding toward zero."""
        if self.is_zero(b):
            raise EvalError(ErrorKind.INTEGER_DIVISION_BY_ZERO, "integer division by zero")
        with numeric_faults("integer division"):
            return self.coerce(self._trunc_div(a, b))

    def pow(self, base: Number, exponent: Number) -> Number:
        with numeric_faults("power"):
            return self.coerce(base ** exponent)

    def factorial(self, value: Number, negated: bool = False) -> Number:
        """Gamma-based factorial, Γ(x+1).

        ``negated`` says a prefix minus is still pending on the operand. Both
        ``value`` and the operand as written, ``-value``, must then be valid.
        """
        operands = (value, -value) if negated else (value,)
        if not all(self._is_valid_factorial(operand) for operand in operands):
            raise EvalError(
                ErrorKind.INVALID_FACTORIAL,
                "factorial of a negative or non-real number",
            )
        with numeric_faults("factorial"):
            return self.coerce(self._gamma_plus_one(value))

    def root(self, base: Number, n: Number) -> Number:
        return self.pow(base, self.div(1.0, n))

    def _unary(self, name: str, rule: Callable[[Number], Number]) -> Callable[[Number], Number]:
        def apply(value: Number) -> Number:
            with numeric_faults(name):
                return self.coerce(rule(value))
        apply.__name__ = name
        return apply


def _trunc(x: float) -> float:
    if math.isfinite(x):
        return float(math.trunc(x))
    return x


class RealArithmetic(Arithmetic):
    """Double-precision floats; division by exactly zero fails."""

    mode = NumberMode.REAL
    _rules = _REAL_RULES
    _constants = {"pi": math.pi, "e": math.e}

    def coerce(self, value: Number) -> float:
        if isinstance(value, complex):
            raise EvalError(ErrorKind.DOMAIN_ERROR, "result is not a real number")
        return float(value)

    def is_zero(self, value: Number) -> bool:
        return value == 0

    def _trunc_div(self, a: float, b: float) -> float:
        return _trunc(a / b)

    def _gamma_plus_one(self, value: float) -> float:
        return math.gamma(value + 1)

    def _is_valid_factorial(self, value: float) -> bool:
        return not value < 0


class ComplexArithmetic(Arithmetic):
    """Complex values; zero tests compare magnitude against epsilon."""

    mode = NumberMode.COMPLEX
    _rules = _COMPLEX_RULES
    _constants = {"pi": complex(math.pi), "e": complex(math.e), "i": 1j}

    def coerce(self, value: Number) -> complex:
        return complex(value)

    def is_zero(self, value: Number) -> bool:
        return value == 0 or self.magnitude(value) < self.epsilon

    def negate(self, value: Number) -> complex:
        # 0 - z, not -z: a zero imaginary part must stay +0.0 for sqrt/log.
        return self.coerce(0.0 - value)

    def _trunc_div(self, a: complex, b: complex) -> complex:
        # Truncation only makes sense on the real parts.
        if abs(b.real) <= self.epsilon:
            raise EvalError(
                ErrorKind.INTEGER_DIVISION_BY_ZERO,
                "integer division by a divisor with no real part",
            )
        return complex(_trunc(a.real / b.real))

    def _gamma_plus_one(self, value: complex) -> complex:
        return complex(math.gamma(value.real + 1))

    def _is_valid_factorial(self, value: complex) -> bool:
        return abs(value.imag) <= self.epsilon and not value.real < 0


def arithmetic_for(mode: NumberMode, epsilon: float = DEFAULT_EPSILON) -> Arithmetic:
    """Build the Arithmetic instance for a mode."""
    if mode == NumberMode.REAL:
        return RealArithmetic(epsilon)
    return ComplexArithmetic(epsilon)
