"""Construction of orthonormal polynomial bases by a discretized Stieltjes procedure.

Given sample points :math:`t_i` with normalized weights :math:`w_i`, the
empirical inner product is

.. math::

    \\langle f, g \\rangle = \\sum_i w_i f(t_i) g(t_i).

Starting from the normalized envelope, each new member is obtained by
multiplying the previous one by ``t`` and orthogonalizing against the two
previous members. The procedure is Gram–Schmidt written directly in terms of
the three-term recurrence coefficients, so evaluating the basis later costs
``O(N)`` per point and no explicit monomial coefficients are ever formed.
"""

from __future__ import annotations

import math
import warnings
from collections.abc import Callable

import numpy as np
from numpy.typing import ArrayLike
from scipy.special import roots_legendre

from orthokit.logger import orthokit_logger
from orthokit.polynomials.basis import OrthPolyBasis
from orthokit.polynomials.envelope import envelope
from orthokit.polynomials.evaluate import evaluate_into
from orthokit.utils.validate import validate_degree, validate_measure, validate_powers

__all__ = [
    "build_orthpoly_basis",
    "resize_basis",
    "discretize",
    "quadrature_grid",
]

QUADRATURE_RULES = ("midpoint", "gauss")
_BREAKDOWN_RTOL = 1e-12
_GRAM_ATOL = 1e-6


def _norm(f: np.ndarray, ww: np.ndarray, n: int, ref: float = 0.0) -> float:
    """Returns the weighted norm of the sampled member ``n`` (1-based).

    ``ref`` is the norm of ``t * J_{n-1}`` before orthogonalization; a
    residual that is only rounding noise relative to it means breakdown.
    """
    a = math.sqrt(float(np.dot(f, ww * f)))
    if not (a > _BREAKDOWN_RTOL * ref and a > 0 and math.isfinite(a)):
        raise ValueError(
            f"orthogonalization broke down at member n={n} (norm {a}); the measure "
            "is degenerate, e.g. it has fewer distinct support points than basis "
            "functions or vanishes on the support of the envelope."
        )
    return a


def build_orthpoly_basis(
    N: int,
    pcut: int,
    tcut: float,
    pin: int,
    tin: float,
    tdf: ArrayLike,
    ww: ArrayLike | None = None,
) -> OrthPolyBasis:
    """Builds ``N`` orthonormal polynomials with respect to a discrete measure.

    The boundary with the smaller coordinate becomes the left boundary of
    the envelope, so ``tcut`` may lie on either side of ``tin``.

    Args:
        N: Number of basis functions (``>= 1``).
        pcut: Envelope power at ``tcut`` (``>= 0``).
        tcut: Cutoff boundary in the transformed coordinate.
        pin: Envelope power at ``tin`` (``>= 0``).
        tin: Inner boundary in the transformed coordinate.
        tdf: Sample points of the measure.
        ww: Non-negative weights; ``None`` means uniform. Normalized to sum
            to one.

    Returns:
        The constructed :class:`OrthPolyBasis`.

    Raises:
        TypeError: If ``N`` or a power is not an integer.
        ValueError: If ``N <= 0``, a power is negative, the weights are
            invalid, or the measure is degenerate.

    Warns:
        RuntimeWarning: If samples lie outside ``[tl, tr]``. The basis is
            still built; it extrapolates the envelope there.
        RuntimeWarning: If the constructed basis deviates from orthonormality
            on the measure by more than ``1e-6``, which happens for domains
            far from the origin relative to their width.
    """
    N = validate_degree(N)
    powers = validate_powers(pcut=pcut, pin=pin)
    pcut, pin = powers["pcut"], powers["pin"]
    tcut, tin = float(tcut), float(tin)
    tdf, ww = validate_measure(tdf, ww)

    if tcut < tin:
        tl, tr, pl, pr = tcut, tin, pcut, pin
    else:
        tl, tr, pl, pr = tin, tcut, pin, pcut

    if tdf.min() < tl or tdf.max() > tr:
        msg = (
            f"sample range [{tdf.min()}, {tdf.max()}] lies outside the envelope "
            f"domain [{tl}, {tr}]."
        )
        orthokit_logger.warning(msg)
        warnings.warn(msg, RuntimeWarning, stacklevel=2)

    return _stieltjes(N, pl, tl, pr, tr, tdf, ww)


def _stieltjes(
    N: int,
    pl: int,
    tl: float,
    pr: int,
    tr: float,
    tdf: np.ndarray,
    ww: np.ndarray,
) -> OrthPolyBasis:
    """Runs the Stieltjes sweep on an already validated, normalized measure."""
    A = np.zeros(N)
    B = np.zeros(N)
    C = np.zeros(N)

    J1_ = envelope(pl, tl, pr, tr, tdf)
    A[0] = 1 / _norm(J1_, ww, 1)
    J1 = A[0] * J1_

    if N > 1:
        # a J2 = (t - b) J1
        tJ = tdf * J1
        b = float(np.dot(tJ, ww * J1))
        J2_ = (tdf - b) * J1
        a = _norm(J2_, ww, 2, _norm(tJ, ww, 2))
        A[1] = 1 / a
        B[1] = -b / a
        Jprev, Jpprev = (A[1] * tdf + B[1]) * J1, J1

    for n in range(2, N):
        # a Jn = (t - b) J_{n-1} - c J_{n-2}
        tJ = tdf * Jprev
        b = float(np.dot(tJ, ww * Jprev))
        c = float(np.dot(tJ, ww * Jpprev))
        J_ = (tdf - b) * Jprev - c * Jpprev
        a = _norm(J_, ww, n + 1, _norm(tJ, ww, n + 1))
        A[n] = 1 / a
        B[n] = -b / a
        C[n] = -c / a
        Jprev, Jpprev = J_ / a, Jprev

    basis = OrthPolyBasis(pl, tl, pr, tr, A, B, C, tdf, ww)
    _check_orthonormality(basis)
    orthokit_logger.info(
        "built orthonormal basis: N=%d, envelope (pl=%d, tl=%g, pr=%d, tr=%g), %d samples",
        N, pl, tl, pr, tr, tdf.size,
    )
    return basis


def _check_orthonormality(basis: OrthPolyBasis) -> None:
    """Warns if the recurrence does not reproduce an orthonormal basis on the measure.

    Cancellation in ``A_n t + B_n`` grows with ``|t|`` relative to the width
    of the domain, so bases on intervals far from the origin can lose
    orthonormality without any member breaking down.
    """
    P = evaluate_into(np.empty((basis.tdf.size, len(basis))), basis, basis.tdf)
    G = P.T @ (basis.ww[:, np.newaxis] * P)
    err = float(np.max(np.abs(G - np.eye(len(basis)))))
    if not err <= _GRAM_ATOL:
        msg = (
            f"basis is not orthonormal on its measure (max Gram matrix error {err:.3e}); "
            f"the domain [{basis.tl}, {basis.tr}] is probably too far from the origin "
            "relative to its width. Shift the coordinate so that the domain is centered."
        )
        orthokit_logger.warning(msg)
        warnings.warn(msg, RuntimeWarning, stacklevel=4)


def resize_basis(N: int, basis: OrthPolyBasis) -> OrthPolyBasis:
    """Rebuilds ``basis`` with ``N`` members from its own measure and envelope.

    The stored measure is already normalized and is used as is, so the first
    ``min(N, len(basis))`` recurrence coefficients coincide bitwise with
    those of ``basis``.
    """
    return _stieltjes(validate_degree(N), basis.pl, basis.tl, basis.pr, basis.tr, basis.tdf, basis.ww)


def quadrature_grid(
    tl: float,
    tr: float,
    num_points: int,
    rule: str = "midpoint",
) -> tuple[np.ndarray, np.ndarray]:
    """Returns quadrature nodes and weights on ``[tl, tr]``.

    Args:
        tl: Left end of the interval.
        tr: Right end of the interval.
        num_points: Number of nodes.
        rule: ``"midpoint"`` for equally spaced cell midpoints with uniform
            weights, or ``"gauss"`` for Gauss–Legendre nodes and weights.

    Returns:
        Tuple ``(nodes, weights)``; the weights sum to ``tr - tl``.
    """
    num_points = validate_degree(num_points)
    if tr <= tl:
        raise ValueError(f"quadrature interval must be non-empty; got [{tl}, {tr}].")
    match rule:
        case "midpoint":
            dt = (tr - tl) / num_points
            nodes = np.linspace(tl + dt / 2, tr - dt / 2, num_points)
            weights = np.full(num_points, dt)
        case "gauss":
            x, w = roots_legendre(num_points)
            nodes = tl + 0.5 * (tr - tl) * (x + 1.0)
            weights = 0.5 * (tr - tl) * w
        case _:
            raise ValueError(f"unknown quadrature rule {rule!r}; expected one of {QUADRATURE_RULES}.")
    return nodes, weights


def discretize(
    N: int,
    *,
    pcut: int = 0,
    xcut: float = 1.0,
    pin: int = 0,
    xin: float = -1.0,
    num_quadrature_points: int | None = None,
    transform: Callable[[float], float] | None = None,
    quadrature: str = "midpoint",
) -> OrthPolyBasis:
    """Builds a Jacobi-type basis from a quadrature grid in the transformed coordinate.

    The boundaries ``xcut`` and ``xin`` are mapped through ``transform``, and
    the resulting interval is discretized with ``num_quadrature_points``
    nodes. With the identity transform and ``pcut = pin = 0`` this yields
    normalized Legendre polynomials.

    Args:
        N: Number of basis functions.
        pcut: Envelope power at the cutoff.
        xcut: Cutoff in the untransformed coordinate.
        pin: Envelope power at the inner boundary.
        xin: Inner boundary in the untransformed coordinate.
        num_quadrature_points: Number of quadrature nodes; defaults to ``3 * N``.
        transform: Coordinate transform; defaults to the identity.
        quadrature: Quadrature rule, see :func:`quadrature_grid`.

    Returns:
        The constructed :class:`OrthPolyBasis`.
    """
    N = validate_degree(N)
    if num_quadrature_points is None:
        num_quadrature_points = 3 * N
    if transform is None:
        tcut, tin = float(xcut), float(xin)
    else:
        tcut, tin = float(transform(xcut)), float(transform(xin))
    tl, tr = min(tin, tcut), max(tin, tcut)
    tdf, ww = quadrature_grid(tl, tr, num_quadrature_points, quadrature)
    return build_orthpoly_basis(N, pcut, tcut, pin, tin, tdf, ww)
