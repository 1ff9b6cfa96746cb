"""Unit tests for public API."""

from __future__ import annotations

import numpy as np

import orthokit
from orthokit import BasisConfig, OrthPolyBasis, PolyTransform, discretize, transformed_jacobi


def test_public_all_is_importable():
    """Test that every name in __all__ resolves on the top-level package."""
    for name in orthokit.__all__:
        assert getattr(orthokit, name) is not None


def test_public_all_contains_core_api():
    """Test that __all__ contains the construction and evaluation entry points."""
    expected = {
        "OrthPolyBasis",
        "build_orthpoly_basis",
        "discretize",
        "evaluate",
        "evaluate_d",
        "evaluate_dd",
        "evaluate_ed",
        "frule_evaluate",
        "rrule_evaluate",
        "rrule_evaluate_d",
        "transformed_jacobi",
        "read_dict",
        "write_dict",
    }
    assert expected.issubset(set(orthokit.__all__))


def test_top_level_workflow(tmp_path):
    """Test a typical workflow using only top-level names."""
    basis = discretize(4, pcut=2, pin=0, num_quadrature_points=100)
    assert isinstance(basis, OrthPolyBasis)
    tb = transformed_jacobi(4, PolyTransform(2, 1.0), 4.0, 0.5)
    assert tb == BasisConfig(4, 4.0, rin=0.5).build(PolyTransform(2, 1.0))
    orthokit.save_json(tb, tmp_path / "tb.json")
    loaded = orthokit.load_json(tmp_path / "tb.json")
    assert np.array_equal(loaded.evaluate(1.5), tb.evaluate(1.5))
