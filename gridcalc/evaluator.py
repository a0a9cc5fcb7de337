"""Recursive-descent expression evaluator.

Grammar, lowest precedence first; each level evaluates as it parses, so no
tree is ever built:

    expression := term { ('+' | '-') term }
    term       := power { ('x' | '//' | '/') power }
    power      := factor [ '^' power ]             right-associative
    factor     := { '-' } primary { ('!' | '%') }
    primary    := number | name '(' args ')' | name
                | '(' expression ')' | '[' expression ']' | '{' expression '}'

Multiplication is the letter ``x``. All parse state (cursor, nesting depth)
lives on a _Parser created per call, so evaluate() is reentrant and safe to
call from several threads at once.
"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from functools import lru_cache
from typing import Callable, Iterator, Optional

from gridcalc.arithmetic import Arithmetic, arithmetic_for
from gridcalc.models import ErrorKind, EvalError, EvaluationOutcome, Number, NumberMode
from gridcalc.settings import Settings

logger = logging.getLogger(__name__)

# Digits with at most one decimal point, then an optional exponent.
_NUMBER_RE = re.compile(r"(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_NAME_RE = re.compile(r"[A-Za-z]+")
_DIGITS = "0123456789"
_CLOSERS = {"(": ")", "[": "]", "{": "}"}


@lru_cache(maxsize=None)
def _arithmetic(mode: NumberMode, epsilon: float) -> Arithmetic:
    # Arithmetic instances are immutable once built.
    return arithmetic_for(mode, epsilon)


class _Parser:
    """One evaluation: a forward-only cursor over ``text``."""

    def __init__(self, text: str, arith: Arithmetic, max_depth: int) -> None:
        self.text = text
        self.arith = arith
        self.max_depth = max_depth
        self.pos = 0
        self.depth = 0

    # -- tokenizing primitives ---------------------------------------------

    def _peek(self) -> str:
        """Current character, or '' at end of input."""
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def _skip_whitespace(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def _scan_number(self) -> Optional[str]:
        match = _NUMBER_RE.match(self.text, self.pos)
        if not match:
            return None
        self.pos = match.end()
        return match.group()

    def _scan_name(self) -> str:
        match = _NAME_RE.match(self.text, self.pos)
        self.pos = match.end()
        return match.group()

    # -- helpers ------------------------------------------------------------

    def _error(self, kind: ErrorKind, message: str, position: Optional[int] = None) -> EvalError:
        return EvalError(kind, message, self.pos if position is None else position)

    def _apply(self, op: Callable[..., Number], *args: Number) -> Number:
        """Run an arithmetic operation, stamping failures with the cursor."""
        try:
            return op(*args)
        except EvalError as exc:
            exc.position = self.pos
            raise

    @contextmanager
    def _nested(self) -> Iterator[None]:
        self.depth += 1
        try:
            if self.depth > self.max_depth:
                raise self._error(
                    ErrorKind.TOO_DEEP,
                    f"expression nested deeper than {self.max_depth} levels",
                )
            yield
        finally:
            self.depth -= 1

    # -- grammar levels -----------------------------------------------------

    def parse(self) -> Number:
        value = self.expression()
        self._skip_whitespace()
        if self.pos < len(self.text):
            raise self._error(
                ErrorKind.TRAILING_INPUT,
                f"unexpected {self.text[self.pos]!r} after a complete expression",
            )
        return value

    def expression(self) -> Number:
        with self._nested():
            value = self.term()
            self._skip_whitespace()
            while self._peek() in ("+", "-"):
                op = self.text[self.pos]
                self.pos += 1
                rhs = self.term()
                if op == "+":
                    value = self._apply(self.arith.add, value, rhs)
                else:
                    value = self._apply(self.arith.sub, value, rhs)
                self._skip_whitespace()
            return value

    def term(self) -> Number:
        value = self.power()
        self._skip_whitespace()
        while True:
            ch = self._peek()
            if ch == "x":
                self.pos += 1
                rhs = self.power()
                value = self._apply(self.arith.mul, value, rhs)
            elif ch == "/":
                self.pos += 1
                if self._peek() == "/":
                    self.pos += 1
                    rhs = self.power()
                    value = self._apply(self.arith.floordiv, value, rhs)
                else:
                    rhs = self.power()
                    value = self._apply(self.arith.div, value, rhs)
            else:
                break
            self._skip_whitespace()
        return value

    def power(self) -> Number:
        base = self.factor()
        self._skip_whitespace()
        if self._peek() == "^":
            self.pos += 1
            with self._nested():
                exponent = self.power()
            return self._apply(self.arith.pow, base, exponent)
        return base

    def factor(self) -> Number:
        self._skip_whitespace()
        negated = False
        while self._peek() == "-":
            negated = not negated
            self.pos += 1
            self._skip_whitespace()

        value = self.primary()
        self._skip_whitespace()
        while self._peek() in ("!", "%"):
            op = self.text[self.pos]
            self.pos += 1
            if op == "!":
                value = self._apply(self.arith.factorial, value, negated)
            else:
                value = self._apply(self.arith.percent, value)
            self._skip_whitespace()

        if negated:
            value = self._apply(self.arith.negate, value)
        return value

    def primary(self) -> Number:
        self._skip_whitespace()
        ch = self._peek()
        if not ch:
            raise self._error(ErrorKind.UNEXPECTED_CHARACTER, "unexpected end of input")
        if _NAME_RE.match(ch):
            return self._name()
        if ch in _DIGITS or ch == ".":
            start = self.pos
            lexeme = self._scan_number()
            if lexeme is None:
                raise self._error(ErrorKind.UNEXPECTED_CHARACTER, "'.' is not a number", start)
            return self._apply(self.arith.coerce, float(lexeme))
        if ch in _CLOSERS:
            return self._group(ch)
        raise self._error(ErrorKind.UNEXPECTED_CHARACTER, f"unexpected character {ch!r}")

    def _name(self) -> Number:
        start = self.pos
        name = self._scan_name()
        self._skip_whitespace()

        if self._peek() == "(":
            function = self.arith.functions.get(name)
            if function is None:
                raise self._error(ErrorKind.UNKNOWN_FUNCTION, f"unknown function '{name}'", start)
            self.pos += 1
            args = self._arguments(name)
            if len(args) != function.arity:
                raise self._error(
                    ErrorKind.ARITY_MISMATCH,
                    f"{name}() takes {function.arity} argument(s), got {len(args)}",
                    start,
                )
            return self._apply(function.rule, *args)

        value = self.arith.constants.get(name)
        if value is None:
            raise self._error(ErrorKind.UNKNOWN_IDENTIFIER, f"unknown identifier '{name}'", start)
        return value

    def _arguments(self, name: str) -> list[Number]:
        args = [self.expression()]
        self._skip_whitespace()
        while self._peek() == ",":
            self.pos += 1
            args.append(self.expression())
            self._skip_whitespace()
        if self._peek() != ")":
            raise self._error(
                ErrorKind.UNMATCHED_DELIMITER,
                f"expected ')' to close the arguments of {name}()",
            )
        self.pos += 1
        return args

    def _group(self, opener: str) -> Number:
        closer = _CLOSERS[opener]
        self.pos += 1
        value = self.expression()
        self._skip_whitespace()
        if self._peek() != closer:
            raise self._error(
                ErrorKind.UNMATCHED_DELIMITER,
                f"expected '{closer}' to match '{opener}'",
            )
        self.pos += 1
        return value


def evaluate(
    text: str,
    mode: Optional[NumberMode] = None,
    settings: Optional[Settings] = None,
) -> EvaluationOutcome:
    """Evaluate one line of text.

    Args:
        text: The expression, e.g. ``"2+3x4"``. A trailing newline is fine.
        mode: Overrides ``settings.mode`` when given.
        settings: Depth limit, epsilon and default mode. Defaults to Settings().

    Returns:
        EvaluationOutcome holding either the value or the first EvalError
        encountered. Never raises for bad input.
    """
    settings = settings or Settings()
    mode = NumberMode(mode) if mode is not None else settings.mode
    parser = _Parser(text, _arithmetic(mode, settings.epsilon), settings.max_depth)
    try:
        value = parser.parse()
    except EvalError as err:
        logger.debug("evaluate(%r) failed at %d: %s", text, err.position, err)
        return EvaluationOutcome(text=text, error=err)
    except RecursionError:
        err = EvalError(ErrorKind.TOO_DEEP, "expression nested too deeply", parser.pos)
        logger.debug("evaluate(%r) hit the interpreter recursion limit", text)
        return EvaluationOutcome(text=text, error=err)
    return EvaluationOutcome(text=text, value=value)


def calc(
    text: str,
    mode: Optional[NumberMode] = None,
    settings: Optional[Settings] = None,
) -> Number:
    """Evaluate ``text`` and return the value, raising EvalError on failure."""
    outcome = evaluate(text, mode=mode, settings=settings)
    if outcome.error is not None:
        raise outcome.error
    return outcome.value
