"""Sampling of transformed coordinates from the measure of a basis."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from orthokit.polynomials.basis import OrthPolyBasis

__all__ = ["rand_radial"]


def rand_radial(
    basis: OrthPolyBasis,
    rng: np.random.Generator | int | None = None,
    size: int | tuple[int, ...] | None = None,
) -> float | np.ndarray:
    """Draws transformed coordinates from the measure a basis was built with.

    Only measures with uniform weights are supported, since sampling then
    reduces to picking sample points uniformly.

    Args:
        basis: The polynomial basis.
        rng: A ``numpy.random.Generator`` or a seed for
            ``numpy.random.default_rng``.
        size: Output shape; ``None`` returns a single float.

    Returns:
        Sample point(s) drawn from ``basis.tdf``.

    Raises:
        ValueError: If the weights of the basis are not uniform.
    """
    if np.any(basis.ww != basis.ww[0]):
        raise ValueError("rand_radial requires a basis built with uniform weights.")
    gen = np.random.default_rng(rng)
    out = gen.choice(basis.tdf, size=size)
    return float(out) if size is None else out
