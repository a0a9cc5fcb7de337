"""Tests for the gridcalc Typer CLI, driven through typer.testing.CliRunner."""

import json

import pytest
from typer.testing import CliRunner

from gridcalc.__main__ import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the caller's GRIDCALC_* variables out of the CLI under test."""
    for key in ("GRIDCALC_MODE", "GRIDCALC_MAX_DEPTH", "GRIDCALC_EPSILON", "GRIDCALC_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)


# --- eval ---

def test_eval_single_expression():
    result = runner.invoke(app, ["eval", "2+3x4"])
    assert result.exit_code == 0
    assert result.output.strip() == "14"


def test_eval_complex_result():
    result = runner.invoke(app, ["eval", "sqrt(-1)"])
    assert result.exit_code == 0
    assert result.output.strip() == "0+1i"


def test_eval_failure_exits_nonzero():
    result = runner.invoke(app, ["eval", "7/0"])
    assert result.exit_code == 1
    assert "DivisionByZero" in result.output


def test_eval_expression_starting_with_minus():
    result = runner.invoke(app, ["eval", "--", "-1!"])
    assert result.exit_code == 1
    assert "InvalidFactorial" in result.output


def test_eval_many_renders_table():
    result = runner.invoke(app, ["eval", "2^3^2", "5!", "50%"])
    assert result.exit_code == 0
    assert "512" in result.output
    assert "120" in result.output
    assert "0.5" in result.output


def test_eval_json():
    result = runner.invoke(app, ["eval", "--json", "7//2", "foo"])
    assert result.exit_code == 1
    records = json.loads(result.output)
    assert records[0]["verdict"] == "ok"
    assert records[0]["value"] == {"real": 3.0, "imag": 0.0}
    assert records[1]["verdict"] == "error"
    assert records[1]["error"]["kind"] == "UnknownIdentifier"


def _reject_constant(name):
    raise ValueError(f"non-standard JSON constant {name}")


def test_eval_json_non_finite_values_are_strings():
    result = runner.invoke(
        app, ["eval", "--json", "--mode", "real", "1e308x10", "1e308x10-1e308x10"],
    )
    assert result.exit_code == 0
    records = json.loads(result.output, parse_constant=_reject_constant)
    assert records[0]["value"] == {"real": "inf", "imag": 0.0}
    assert records[1]["value"] == {"real": "nan", "imag": 0.0}


def test_eval_real_mode():
    result = runner.invoke(app, ["eval", "--mode", "real", "i"])
    assert result.exit_code == 1
    assert "UnknownIdentifier" in result.output


def test_eval_mode_from_environment(monkeypatch):
    monkeypatch.setenv("GRIDCALC_MODE", "real")
    result = runner.invoke(app, ["eval", "sqrt(-1)"])
    assert result.exit_code == 1
    assert "DomainError" in result.output


def test_eval_invalid_mode():
    result = runner.invoke(app, ["eval", "--mode", "octonion", "1"])
    assert result.exit_code == 1
    assert "Invalid mode" in result.output


def test_eval_max_depth_option():
    result = runner.invoke(app, ["eval", "--max-depth", "2", "((1))"])
    assert result.exit_code == 1
    assert "TooDeep" in result.output


# --- repl ---

def test_repl_evaluates_lines_until_quit():
    result = runner.invoke(app, ["repl"], input="2+3x4\n\n7/0\nq\n5!\n")
    assert result.exit_code == 0
    assert "14" in result.output
    assert "DivisionByZero" in result.output
    assert "120" not in result.output


def test_repl_stops_at_end_of_input():
    result = runner.invoke(app, ["repl", "--mode", "real"], input="root(27, 3)\n")
    assert result.exit_code == 0
    assert "real mode" in result.output
    assert "3" in result.output


# --- functions ---

def test_functions_lists_registry():
    result = runner.invoke(app, ["functions"])
    assert result.exit_code == 0
    assert "root" in result.output
    assert "arccos" in result.output
    assert "Constants (complex)" in result.output


def test_functions_real_mode():
    result = runner.invoke(app, ["functions", "--mode", "real"])
    assert result.exit_code == 0
    assert "Functions (real)" in result.output
