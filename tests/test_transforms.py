"""Tests for orthokit.transforms.transforms."""

from __future__ import annotations

import numpy as np
import pytest
from numpy.testing import assert_allclose

from orthokit.testing import fdtest
from orthokit.transforms.transforms import (
    DistanceTransform,
    IdTransform,
    MorseTransform,
    PolyTransform,
    validate_transform,
)

TRANSFORMS = [IdTransform(), PolyTransform(2, 1.0), PolyTransform(3.5, 0.2), MorseTransform(1.5, 1.2)]


@pytest.mark.parametrize("trans", TRANSFORMS, ids=repr)
@pytest.mark.parametrize("r0", [0.4, 1.0, 2.7])
def test_derivatives_match_finite_differences(trans, r0):
    """Tests the closed-form derivatives of every transform."""
    assert fdtest(trans, trans.derivative, r0)
    assert fdtest(trans.derivative, trans.second_derivative, r0)


@pytest.mark.parametrize("trans", TRANSFORMS, ids=repr)
def test_inverse_recovers_distance(trans):
    """Tests that the inverse undoes the transform."""
    r = np.linspace(0.3, 4.0, 9)
    assert_allclose(trans.inverse(trans(r)), r, rtol=1e-12)


@pytest.mark.parametrize("trans", TRANSFORMS, ids=repr)
def test_scalar_in_scalar_out(trans):
    """Tests that scalars map to scalars and arrays keep their shape."""
    assert np.ndim(trans(1.3)) == 0
    assert np.ndim(trans.derivative(1.3)) == 0
    assert trans(np.ones((2, 3))).shape == (2, 3)
    assert trans.second_derivative(np.ones(4)).shape == (4,)


def test_reference_distance_maps_to_one():
    """Tests that r0 maps to one for the poly and Morse transforms."""
    assert PolyTransform(2, 1.0)(1.0) == pytest.approx(1.0)
    assert MorseTransform(3.0, 2.5)(2.5) == pytest.approx(1.0)


def test_poly_transform_closed_form():
    """Tests the poly transform against its formula."""
    trans = PolyTransform(2, 1.0)
    assert trans(3.0) == pytest.approx(0.25)
    assert trans.derivative(3.0) == pytest.approx(-2 / 4 * 0.25)
    assert trans.second_derivative(3.0) == pytest.approx(6 / 16 * 0.25)


def test_transforms_are_monotone_decreasing():
    """Tests that the poly and Morse transforms decrease with distance."""
    r = np.linspace(0.1, 5.0, 50)
    for trans in (PolyTransform(2, 1.0), MorseTransform(1.5, 1.2)):
        assert np.all(np.diff(trans(r)) < 0)
        assert np.all(trans.derivative(r) < 0)


@pytest.mark.parametrize(
    "factory, args",
    [(PolyTransform, (0, 1.0)), (PolyTransform, (2, -1.0)), (MorseTransform, (0.0, 1.0)), (MorseTransform, (1.0, 0.0))],
)
def test_invalid_parameters_raise(factory, args):
    """Tests that invalid transform parameters are rejected."""
    with pytest.raises(ValueError):
        factory(*args)


def test_equality_hash_and_repr():
    """Tests value semantics of the transforms."""
    assert PolyTransform(2, 1.0) == PolyTransform(2, 1.0)
    assert PolyTransform(2, 1.0) != PolyTransform(3, 1.0)
    assert MorseTransform(1.5, 1.2) == MorseTransform(1.5, 1.2)
    assert IdTransform() == IdTransform()
    assert PolyTransform(2, 1.0) != MorseTransform(2, 1.0)
    assert len({PolyTransform(2, 1.0), PolyTransform(2, 1.0), IdTransform()}) == 2
    assert repr(PolyTransform(2, 1.0)) == "PolyTransform(p=2, r0=1.0)"


def test_protocol_and_validation():
    """Tests the distance transform protocol check."""
    for trans in TRANSFORMS:
        assert isinstance(trans, DistanceTransform)
        assert validate_transform(trans) is trans
    with pytest.raises(TypeError, match="protocol"):
        validate_transform(lambda r: r)
