"""Unit tests for orthokit.utils.validate."""

from __future__ import annotations

import numpy as np
import pytest
from numpy.testing import assert_allclose

from orthokit.utils.validate import (
    resolve_maxn,
    validate_buffer,
    validate_cotangent,
    validate_degree,
    validate_measure,
    validate_powers,
)


@pytest.mark.parametrize("N", [1, 7, np.int64(3)])
def test_validate_degree_accepts_positive_integers(N) -> None:
    """Tests that positive integers, including numpy integers, are accepted."""
    out = validate_degree(N)
    assert out == N and type(out) is int


@pytest.mark.parametrize("N, exc", [(0, ValueError), (-1, ValueError), (2.0, TypeError), (True, TypeError)])
def test_validate_degree_rejects(N, exc) -> None:
    """Tests that non-positive or non-integer sizes are rejected."""
    with pytest.raises(exc):
        validate_degree(N)


def test_validate_powers() -> None:
    """Tests that powers are converted to int and negatives are rejected."""
    assert validate_powers(pcut=np.int32(2), pin=0) == {"pcut": 2, "pin": 0}
    with pytest.raises(ValueError, match="pin"):
        validate_powers(pcut=1, pin=-1)
    with pytest.raises(TypeError, match="pcut"):
        validate_powers(pcut=1.5)


def test_validate_measure_normalizes_weights() -> None:
    """Tests that weights are normalized and default to uniform."""
    tdf, ww = validate_measure([0.0, 1.0, 2.0], [1.0, 2.0, 1.0])
    assert tdf.dtype == np.float64
    assert_allclose(ww, [0.25, 0.5, 0.25])
    _, ww = validate_measure([0.0, 1.0, 2.0, 3.0])
    assert_allclose(ww, 0.25)


@pytest.mark.parametrize(
    "tdf, ww",
    [
        ([], None),
        ([[0.0, 1.0]], None),
        ([0.0, np.inf], None),
        ([0.0, 1.0], [1.0]),
        ([0.0, 1.0], [1.0, -0.5]),
        ([0.0, 1.0], [0.0, 0.0]),
        ([0.0, 1.0], [1.0, np.nan]),
    ],
)
def test_validate_measure_rejects(tdf, ww) -> None:
    """Tests the rejection of invalid measures."""
    with pytest.raises(ValueError):
        validate_measure(tdf, ww)


def test_validate_measure_does_not_alias_input() -> None:
    """Tests that the returned samples are a copy of the input."""
    x = np.array([0.0, 1.0])
    tdf, _ = validate_measure(x)
    tdf[0] = 5.0
    assert x[0] == 0.0


def test_resolve_maxn() -> None:
    """Tests the resolution of prefix lengths."""
    assert resolve_maxn(None, 6) == 6
    assert resolve_maxn(2, 6) == 2
    with pytest.raises(ValueError):
        resolve_maxn(7, 6)
    with pytest.raises(ValueError):
        resolve_maxn(0, 6)
    with pytest.raises(TypeError):
        resolve_maxn(1.0, 6)


def test_validate_buffer() -> None:
    """Tests buffer shape and capacity checks."""
    validate_buffer(np.empty((3, 5)), 4, (3,))
    validate_buffer(np.empty(5), 5, ())
    with pytest.raises(ValueError, match="capacity"):
        validate_buffer(np.empty((3, 2)), 4, (3,))
    with pytest.raises(ValueError, match="shape"):
        validate_buffer(np.empty((2, 5)), 4, (3,))
    with pytest.raises(TypeError):
        validate_buffer([0.0] * 5, 4, ())


def test_validate_cotangent() -> None:
    """Tests cotangent conversion and length checks."""
    w = validate_cotangent([1, 2, 3], 5)
    assert w.dtype == np.float64 and w.shape == (3,)
    with pytest.raises(ValueError):
        validate_cotangent(np.ones(6), 5)
    with pytest.raises(ValueError):
        validate_cotangent(1.0, 5)
