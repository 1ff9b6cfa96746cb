"""Finite-difference checks for analytic derivatives.

:func:`fdtest` compares an analytic derivative against one-sided finite
differences over a decreasing sequence of step sizes. The error of a correct
derivative first decreases like ``O(h)`` and then grows again once rounding
dominates. The check passes when the smallest error over the sequence is
small relative to the size of the derivative and at least a thousand times
smaller than the error at the largest step. A wrong derivative stalls at its
own offset instead, however small that offset is.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

import numpy as np
from numpy.typing import ArrayLike

from orthokit.logger import orthokit_logger

__all__ = ["fdtest", "DEFAULT_STEPS"]

#: Step sizes ``10^-2, ..., 10^-10`` used by :func:`fdtest`.
DEFAULT_STEPS = tuple(10.0 ** -k for k in range(2, 11))
_CONVERGENCE_FACTOR = 1e-3
_EXACT_ATOL = 1e-10


def fdtest(
    F: Callable[[np.ndarray], ArrayLike],
    dF: Callable[[np.ndarray], ArrayLike],
    x0: ArrayLike,
    *,
    steps: Sequence[float] = DEFAULT_STEPS,
    rtol: float = 1e-5,
    verbose: bool = False,
) -> bool:
    """Checks ``dF`` against finite differences of ``F`` at ``x0``.

    For scalar ``x0`` the derivative ``dF(x0)`` must have the shape of
    ``F(x0)``. For a vector ``x0`` of length ``d`` it must have shape
    ``F(x0).shape + (d,)``, i.e. the partial derivatives run along the
    last axis.

    Args:
        F: Function to differentiate.
        dF: Claimed derivative of ``F``.
        x0: Point at which to compare.
        steps: Decreasing step sizes.
        rtol: Tolerance on the smallest error, relative to
            ``max(1, max|dF(x0)|)``.
        verbose: If True, the error table is logged at ``INFO`` level.

    Returns:
        True if the finite differences converge to ``dF(x0)``.
    """
    x0 = np.asarray(x0, dtype=np.float64)
    scalar = x0.ndim == 0
    xs = x0.reshape(-1)
    F0 = np.asarray(F(x0), dtype=np.float64)
    dF0 = np.asarray(dF(x0), dtype=np.float64)
    if scalar:
        dF0 = dF0[..., np.newaxis]

    errors = []
    for h in steps:
        dFh = np.empty(F0.shape + (xs.size,))
        for i in range(xs.size):
            x = xs.copy()
            x[i] += h
            x = x.reshape(x0.shape)
            dFh[..., i] = (np.asarray(F(x), dtype=np.float64) - F0) / h
        errors.append(float(np.max(np.abs(dFh - dF0))))
        if verbose:
            orthokit_logger.info("fdtest: h = %.1e, error = %.3e", h, errors[-1])

    scale = max(1.0, float(np.max(np.abs(dF0))))
    best = min(errors)
    # a correct derivative gains at least three digits over the step sequence
    # unless the differences are exact up to rounding from the start
    converged = best <= _CONVERGENCE_FACTOR * errors[0] or best <= _EXACT_ATOL * scale
    passed = best <= rtol * scale and converged
    if not passed:
        orthokit_logger.warning(
            "fdtest failed at x0=%s: smallest error %.3e, largest step error %.3e (scale %.3e).",
            x0, best, errors[0], scale,
        )
    return passed
