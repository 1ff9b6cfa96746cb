"""Unit tests for orthokit.testing.fdtest."""

from __future__ import annotations

import logging

import numpy as np
import pytest

from orthokit.polynomials.evaluate import evaluate_d, evaluate_dd
from orthokit.testing import fdtest


def test_correct_scalar_derivative_passes():
    """Tests that a correct derivative of a scalar function passes."""
    assert fdtest(np.sin, np.cos, 0.7)


def test_wrong_derivative_fails(caplog):
    """Tests that a wrong derivative fails and logs a warning."""
    with caplog.at_level(logging.WARNING, logger="orthokit"):
        assert not fdtest(np.sin, np.sin, 0.7)
    assert "fdtest failed" in caplog.text


def test_vector_valued_function():
    """Tests a vector-valued function of a scalar."""
    assert fdtest(lambda x: np.array([x**2, np.exp(x)]), lambda x: np.array([2 * x, np.exp(x)]), 0.3)


def test_gradient_of_function_of_vector():
    """Tests a scalar function of a vector with its gradient."""
    def F(x):
        return np.sum(x**3)

    def dF(x):
        return 3 * x**2

    assert fdtest(F, dF, np.array([0.2, -0.5, 1.1]))
    assert not fdtest(F, lambda x: 2 * x, np.array([0.2, -0.5, 1.1]))


def test_verbose_logs_error_table(caplog):
    """Tests that verbose mode logs one line per step."""
    with caplog.at_level(logging.INFO, logger="orthokit"):
        fdtest(np.exp, np.exp, 0.0, steps=(1e-2, 1e-3, 1e-4), verbose=True)
    assert caplog.text.count("fdtest: h =") == 3


@pytest.mark.parametrize("x0", [0.0, 0.7, -1.3])
def test_slightly_wrong_derivative_fails(x0):
    """Tests that a derivative off by a relative 1e-4 is rejected."""
    assert fdtest(np.exp, np.exp, x0)
    assert not fdtest(np.exp, lambda x: np.exp(x) * (1 + 1e-4), x0)
    assert not fdtest(np.sin, lambda x: np.cos(x) * (1 + 1e-4), x0)


def test_small_offset_in_one_component_fails(jacobi_basis):
    """Tests that an offset in a single member of a basis derivative is rejected."""
    # opposite in sign to the truncation error, so that no step cancels it
    slope = evaluate_dd(jacobi_basis, 0.3 + 1e-4)[-1] - evaluate_dd(jacobi_basis, 0.3)[-1]
    offset = np.copysign(5e-3, -slope)

    def wrong_dd(t):
        ddP = evaluate_dd(jacobi_basis, t).copy()
        ddP[..., -1] += offset
        return ddP

    assert fdtest(lambda t: evaluate_d(jacobi_basis, t), lambda t: evaluate_dd(jacobi_basis, t), 0.3)
    assert not fdtest(lambda t: evaluate_d(jacobi_basis, t), wrong_dd, 0.3)
    assert not fdtest(
        lambda t: evaluate_d(jacobi_basis, t),
        lambda t: evaluate_dd(jacobi_basis, t) * (1 + 1e-4),
        0.3,
    )


def test_stalled_error_fails_even_within_tolerance():
    """Tests that an error that does not decrease with the step is rejected."""
    assert not fdtest(np.exp, lambda x: np.exp(x) + 1e-4, 0.2, rtol=1e-3)


@pytest.mark.parametrize("x0", [0.0, 2.5])
def test_exact_differences_pass(x0):
    """Tests that linear and constant functions pass although the error cannot decrease."""
    assert fdtest(lambda x: 3.0 * x - 1.0, lambda x: 3.0, x0)
    assert fdtest(lambda x: np.full(2, 4.0), lambda x: np.zeros(2), x0)
