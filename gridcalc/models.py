"""Data models for the gridcalc evaluator.

NumberMode, ErrorKind, EvalError, EvaluationOutcome — the typed structures
that flow from evaluator → display → CLI.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

Number = Union[float, complex]


class NumberMode(str, Enum):
    """Numeric capability the evaluator runs with."""

    REAL = "real"
    COMPLEX = "complex"


class ErrorKind(str, Enum):
    """Failure taxonomy. Values are the names shown to the user."""

    DIVISION_BY_ZERO = "DivisionByZero"
    INTEGER_DIVISION_BY_ZERO = "IntegerDivisionByZero"
    INVALID_FACTORIAL = "InvalidFactorial"
    UNKNOWN_FUNCTION = "UnknownFunction"
    ARITY_MISMATCH = "ArityMismatch"
    UNKNOWN_IDENTIFIER = "UnknownIdentifier"
    UNMATCHED_DELIMITER = "UnmatchedDelimiter"
    UNEXPECTED_CHARACTER = "UnexpectedCharacter"
    TRAILING_INPUT = "TrailingInput"
    TOO_DEEP = "TooDeep"
    DOMAIN_ERROR = "DomainError"
    OVERFLOW = "Overflow"


class EvalError(Exception):
    """A single evaluation failure.

    Raised inside the parser and caught at the evaluate() boundary, which
    wraps it in an EvaluationOutcome. ``position`` is the cursor offset into
    the input where the failure was detected.
    """

    def __init__(self, kind: ErrorKind, message: str, position: int = 0) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.position = position

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"

    def __repr__(self) -> str:
        return f"EvalError({self.kind.value!r}, {self.message!r}, position={self.position})"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "position": self.position,
        }


@dataclass
class EvaluationOutcome:
    """Result of one evaluate() call: exactly one of value/error is set."""

    text: str
    value: Optional[Number] = None
    error: Optional[EvalError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def verdict(self) -> str:
        return "ok" if self.ok else "error"

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        d: dict = {"expression": self.text, "verdict": self.verdict}
        if self.error is not None:
            d["error"] = self.error.to_dict()
            return d
        value = complex(self.value)
        d["value"] = {"real": _json_float(value.real), "imag": _json_float(value.imag)}
        return d


def _json_float(x: float) -> Union[float, str]:
    """Finite floats pass through; inf and nan become "inf", "-inf", "nan"."""
    return x if math.isfinite(x) else repr(x)
