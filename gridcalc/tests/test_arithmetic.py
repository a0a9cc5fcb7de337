"""Tests for the real and complex arithmetic capabilities."""

import math

import pytest

from gridcalc.arithmetic import (
    ComplexArithmetic,
    DEFAULT_EPSILON,
    RealArithmetic,
    arithmetic_for,
)
from gridcalc.models import ErrorKind, EvalError, NumberMode


@pytest.fixture
def real():
    return RealArithmetic()


@pytest.fixture
def cplx():
    return ComplexArithmetic()


# --- Construction ---

def test_arithmetic_for_mode():
    assert isinstance(arithmetic_for(NumberMode.REAL), RealArithmetic)
    assert isinstance(arithmetic_for(NumberMode.COMPLEX), ComplexArithmetic)
    assert arithmetic_for(NumberMode.COMPLEX).epsilon == DEFAULT_EPSILON


def test_registries_are_read_only(real):
    with pytest.raises(TypeError):
        real.functions["exp"] = real.functions["sqrt"]
    with pytest.raises(TypeError):
        real.constants["tau"] = 2 * math.pi


def test_function_arities(cplx):
    arities = {name: f.arity for name, f in cplx.functions.items()}
    assert arities == {
        "log": 1, "ln": 1, "cos": 1, "sin": 1, "tan": 1,
        "arccos": 1, "arcsin": 1, "arctan": 1, "sqrt": 1, "root": 2,
    }


def test_constants_per_mode(real, cplx):
    assert set(real.constants) == {"pi", "e"}
    assert set(cplx.constants) == {"pi", "e", "i"}
    assert cplx.constants["i"] == 1j


# --- Zero tests ---

def test_real_zero_is_exact(real):
    assert real.is_zero(0.0)
    assert not real.is_zero(1e-300)


def test_complex_zero_uses_epsilon(cplx):
    assert cplx.is_zero(complex(1e-13, 1e-13))
    assert not cplx.is_zero(1e-11j)
    assert cplx.magnitude(3 + 4j) == pytest.approx(5.0)


# --- Operations ---

def test_floordiv_truncates(real, cplx):
    assert real.floordiv(-7.0, 2.0) == -3.0
    assert real.floordiv(7.0, 2.0) == 3.0
    assert cplx.floordiv(complex(7.5, 3), complex(2, 9)) == complex(3)


def test_div_by_zero_raises(real):
    with pytest.raises(EvalError) as excinfo:
        real.div(1.0, 0.0)
    assert excinfo.value.kind == ErrorKind.DIVISION_BY_ZERO


def test_factorial(real, cplx):
    assert real.factorial(3.0) == pytest.approx(6.0)
    assert cplx.factorial(complex(4)) == pytest.approx(24.0)


def test_factorial_with_pending_negation_is_invalid(real):
    with pytest.raises(EvalError) as excinfo:
        real.factorial(2.0, negated=True)
    assert excinfo.value.kind == ErrorKind.INVALID_FACTORIAL


def test_factorial_tolerates_rounding_noise_in_imag(cplx):
    assert cplx.factorial(complex(3, 1e-15)) == pytest.approx(6.0)


def test_complex_negate_keeps_positive_zero_imag(cplx):
    negated = cplx.negate(complex(1, 0))
    assert negated == -1
    assert math.copysign(1.0, negated.imag) == 1.0


def test_real_pow_with_complex_result_is_domain_error(real):
    with pytest.raises(EvalError) as excinfo:
        real.pow(-8.0, 1 / 3)
    assert excinfo.value.kind == ErrorKind.DOMAIN_ERROR


def test_complex_pow_principal_root(cplx):
    value = cplx.pow(-8 + 0j, complex(1 / 3))
    assert value.real == pytest.approx(1.0)
    assert value.imag == pytest.approx(math.sqrt(3))


def test_root(real):
    assert real.root(27.0, 3.0) == pytest.approx(3.0)
    with pytest.raises(EvalError):
        real.root(8.0, 0.0)
