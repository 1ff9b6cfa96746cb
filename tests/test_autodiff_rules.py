"""Tests for orthokit.autodiff.rules."""

from __future__ import annotations

import numpy as np
import pytest
from numpy.testing import assert_allclose

from orthokit.autodiff.rules import frule_evaluate, rrule_evaluate, rrule_evaluate_d
from orthokit.polynomials.evaluate import evaluate, evaluate_d, evaluate_dd
from orthokit.testing import fdtest
from orthokit.utils.pool import ArrayPool


@pytest.fixture
def cotangent():
    """Fixed cotangent of length 8."""
    return np.random.default_rng(3).standard_normal(8)


def test_frule_scales_derivatives_by_tangent(jacobi_basis):
    """Tests that the forward rule returns values and derivatives times the tangent."""
    t = np.array([-0.4, 0.2, 0.7])
    dt = np.array([2.0, -1.0, 0.5])
    P, dP = frule_evaluate(jacobi_basis, t, dt)
    assert_allclose(P, evaluate(jacobi_basis, t))
    assert_allclose(dP, evaluate_d(jacobi_basis, t) * dt[:, np.newaxis])


def test_frule_scalar_tangent(jacobi_basis):
    """Tests the forward rule at a single point with a prefix."""
    P, dP = frule_evaluate(jacobi_basis, 0.3, 3.0, maxn=4)
    assert P.shape == dP.shape == (4,)
    assert_allclose(dP, 3.0 * evaluate_d(jacobi_basis, 0.3, maxn=4))


def test_frule_scalar_point_with_tangent_array(jacobi_basis):
    """Tests that several tangents at one point give one derivative row per tangent."""
    dt = np.array([1.0, -2.0, 0.25])
    pool = ArrayPool()
    P, dP = frule_evaluate(jacobi_basis, 0.3, dt, pool=pool)
    assert P.shape == (8,)
    assert dP.shape == (3, 8)
    assert_allclose(dP, dt[:, np.newaxis] * evaluate_d(jacobi_basis, 0.3))
    # the unscaled derivative buffer went back to the pool
    assert pool.num_free() == 1


def test_frule_tangent_broadcasts_over_points(jacobi_basis):
    """Tests that a row of points combined with a column of tangents broadcasts."""
    t = np.array([-0.5, 0.0, 0.6])
    dt = np.array([[1.0], [3.0]])
    P, dP = frule_evaluate(jacobi_basis, t, dt)
    assert P.shape == (3, 8)
    assert dP.shape == (2, 3, 8)
    assert_allclose(dP[1], 3.0 * evaluate_d(jacobi_basis, t))


def test_frule_incompatible_tangent_raises(jacobi_basis):
    """Tests that a tangent not broadcasting with the points is rejected."""
    with pytest.raises(ValueError):
        frule_evaluate(jacobi_basis, np.zeros(3), np.ones(2))


@pytest.mark.parametrize("maxn", [1, 2, 5, 8])
def test_rrule_contracts_first_derivatives(jacobi_basis, cotangent, maxn):
    """Tests that the reverse rule equals the contraction of the derivative matrix."""
    w = cotangent[:maxn]
    for t in (-0.6, 0.1, 0.85):
        expected = evaluate_d(jacobi_basis, t, maxn=maxn) @ w
        assert rrule_evaluate(jacobi_basis, t, w) == pytest.approx(expected, rel=1e-10, abs=1e-9)


@pytest.mark.parametrize("maxn", [1, 2, 5, 8])
def test_rrule_d_contracts_second_derivatives(jacobi_basis, cotangent, maxn):
    """Tests that the default second-order rule contracts the second derivatives."""
    w = cotangent[:maxn]
    for t in (-0.6, 0.1, 0.85):
        expected = evaluate_dd(jacobi_basis, t, maxn=maxn) @ w
        assert rrule_evaluate_d(jacobi_basis, t, w) == pytest.approx(expected, rel=1e-10, abs=1e-8)


def test_rrule_d_with_outer_transform(jacobi_basis, cotangent):
    """Tests the second-order rule with nontrivial transform derivatives."""
    t, dt, ddt = 0.25, -1.7, 0.6
    expected = (
        evaluate_dd(jacobi_basis, t) @ cotangent * dt**2
        + evaluate_d(jacobi_basis, t) @ cotangent * ddt
    )
    assert rrule_evaluate_d(jacobi_basis, t, cotangent, dt, ddt) == pytest.approx(expected, rel=1e-10, abs=1e-8)


def test_rrule_d_is_derivative_of_rrule(jacobi_basis, cotangent):
    """Tests that the second-order rule differentiates the first-order rule."""
    assert fdtest(
        lambda t: rrule_evaluate(jacobi_basis, t, cotangent),
        lambda t: rrule_evaluate_d(jacobi_basis, t, cotangent),
        0.15,
    )


def test_rrules_accept_arrays(jacobi_basis, cotangent):
    """Tests that the reverse rules act element-wise on arrays of points."""
    t = np.linspace(-0.9, 0.9, 5)
    out = rrule_evaluate(jacobi_basis, t, cotangent)
    out_d = rrule_evaluate_d(jacobi_basis, t, cotangent)
    assert out.shape == out_d.shape == (5,)
    assert_allclose(out, evaluate_d(jacobi_basis, t) @ cotangent, rtol=1e-10, atol=1e-9)
    assert_allclose(out_d, evaluate_dd(jacobi_basis, t) @ cotangent, rtol=1e-10, atol=1e-8)


def test_rrules_return_float_for_scalar(jacobi_basis, cotangent):
    """Tests that a scalar point gives a plain float."""
    assert isinstance(rrule_evaluate(jacobi_basis, 0.0, cotangent), float)
    assert isinstance(rrule_evaluate_d(jacobi_basis, 0.0, cotangent), float)


def test_rrules_vanish_outside_domain(jacobi_basis, cotangent):
    """Tests that the contractions vanish where the envelope is cut off."""
    assert rrule_evaluate(jacobi_basis, 1.5, cotangent) == 0.0
    assert rrule_evaluate_d(jacobi_basis, -2.0, cotangent, 2.0, 1.0) == 0.0


@pytest.mark.parametrize("w", [np.ones(9), np.ones((2, 4)), np.array([])])
def test_invalid_cotangent_raises(jacobi_basis, w):
    """Tests that cotangents longer than the basis, not 1D, or empty are rejected."""
    with pytest.raises(ValueError, match="cotangent"):
        rrule_evaluate(jacobi_basis, 0.0, w)
    with pytest.raises(ValueError, match="cotangent"):
        rrule_evaluate_d(jacobi_basis, 0.0, w)
