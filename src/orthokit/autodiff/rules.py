r"""Forward- and reverse-mode differentiation rules for orthonormal polynomial bases.

A basis usually sits beneath an outer coordinate transform
:math:`t = \tau(r)` inside a larger differentiable pipeline. The rules below
push tangents through the basis, or pull cotangents back, without ever
forming the full derivative matrix.

* :func:`frule_evaluate`: given a tangent :math:`\dot t`, returns
  :math:`(P(t), P'(t) \dot t)`.
* :func:`rrule_evaluate`: given a cotangent :math:`w`, returns
  :math:`\sum_n w_n P_n'(t)`.
* :func:`rrule_evaluate_d`: given :math:`w`, :math:`\tau'` and
  :math:`\tau''`, returns
  :math:`\sum_n w_n (P_n''(t) \tau'^2 + P_n'(t) \tau'')`, i.e. the second
  derivative of :math:`r \mapsto \sum_n w_n P_n(\tau(r))`.

Both reverse rules run one :math:`O(N)` sweep of the recurrence that carries
the last two values (and derivatives) alongside the contraction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike

from orthokit.polynomials.envelope import envelope, envelope_d, envelope_dd
from orthokit.polynomials.evaluate import evaluate_ed
from orthokit.utils.pool import ArrayPool, resolve_pool
from orthokit.utils.types import ScalarOrArray
from orthokit.utils.validate import validate_cotangent

if TYPE_CHECKING:
    from orthokit.polynomials.basis import OrthPolyBasis

__all__ = [
    "frule_evaluate",
    "rrule_evaluate",
    "rrule_evaluate_d",
]


def _as_result(a):
    return float(a) if np.ndim(a) == 0 else a


def frule_evaluate(
    basis: OrthPolyBasis,
    t: ArrayLike,
    dt: ArrayLike,
    *,
    maxn: int | None = None,
    pool: ArrayPool | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Pushes the tangent ``dt`` through the basis.

    Args:
        basis: The polynomial basis.
        t: Evaluation point(s).
        dt: Tangent of ``t``; a scalar or an array broadcasting with ``t``.
        maxn: Number of basis functions; defaults to all.
        pool: Pool the results are acquired from.

    Returns:
        Tuple ``(P, dP * dt)``, the values and their directional derivatives.
        ``P`` has shape ``t.shape + (maxn,)``; the directional derivatives
        have the broadcast shape of ``t`` and ``dt``, plus the basis axis.
    """
    pool = resolve_pool(pool)
    P, dP = evaluate_ed(basis, t, maxn=maxn, pool=pool)
    dt = np.asarray(dt, dtype=np.float64)[..., np.newaxis]
    if np.broadcast_shapes(dP.shape, dt.shape) == dP.shape:
        dP *= dt
        return P, dP
    dPdt = dP * dt
    pool.release(dP)
    return P, dPdt


def rrule_evaluate(basis: OrthPolyBasis, t: ArrayLike, w: ArrayLike) -> ScalarOrArray:
    """Contracts the derivatives of the basis with the cotangent ``w``.

    Args:
        basis: The polynomial basis.
        t: Evaluation point(s).
        w: Cotangent, one weight per basis function. Its length sets the
            number of basis functions taken into account.

    Returns:
        ``sum_n w[n] * dP_n(t)``; a float for scalar ``t``, otherwise an array
        with the shape of ``t``.

    Raises:
        ValueError: If ``w`` is longer than the basis.
    """
    w = validate_cotangent(w, len(basis))
    maxn = w.size
    t = np.asarray(t, dtype=np.float64)
    A, B, C = basis.A, basis.B, basis.C

    P1 = A[0] * envelope(basis.pl, basis.tl, basis.pr, basis.tr, t)
    dP1 = A[0] * envelope_d(basis.pl, basis.tl, basis.pr, basis.tr, t)
    a = dP1 * w[0]
    if maxn == 1:
        return _as_result(a)

    alpha = A[1] * t + B[1]
    P2 = alpha * P1
    dP2 = alpha * dP1 + A[1] * P1
    a = a + dP2 * w[1]

    for n in range(2, maxn):
        alpha = A[n] * t + B[n]
        P3 = alpha * P2 + C[n] * P1
        dP3 = alpha * dP2 + C[n] * dP1 + A[n] * P2
        a = a + dP3 * w[n]
        P2, P1 = P3, P2
        dP2, dP1 = dP3, dP2
    return _as_result(a)


def rrule_evaluate_d(
    basis: OrthPolyBasis,
    t: ArrayLike,
    w: ArrayLike,
    dt: ArrayLike = 1.0,
    ddt: ArrayLike = 0.0,
) -> ScalarOrArray:
    """Second-order reverse rule through an outer transform.

    Args:
        basis: The polynomial basis.
        t: Evaluation point(s), ``t = trans(r)``.
        w: Cotangent, one weight per basis function.
        dt: First derivative ``trans'(r)`` of the outer transform.
        ddt: Second derivative ``trans''(r)`` of the outer transform.

    Returns:
        ``sum_n w[n] * (ddP_n(t) * dt**2 + dP_n(t) * ddt)``. With the default
        ``dt=1, ddt=0`` this is the contraction of the second derivatives.
    """
    w = validate_cotangent(w, len(basis))
    maxn = w.size
    t = np.asarray(t, dtype=np.float64)
    dt = np.asarray(dt, dtype=np.float64)
    ddt = np.asarray(ddt, dtype=np.float64)
    dt2 = dt**2
    A, B, C = basis.A, basis.B, basis.C

    P1 = A[0] * envelope(basis.pl, basis.tl, basis.pr, basis.tr, t)
    dP1 = A[0] * envelope_d(basis.pl, basis.tl, basis.pr, basis.tr, t)
    ddP1 = A[0] * envelope_dd(basis.pl, basis.tl, basis.pr, basis.tr, t)
    a = (ddP1 * dt2 + dP1 * ddt) * w[0]
    if maxn == 1:
        return _as_result(a)

    alpha = A[1] * t + B[1]
    P2 = alpha * P1
    dP2 = alpha * dP1 + A[1] * P1
    ddP2 = alpha * ddP1 + 2 * A[1] * dP1
    a = a + (ddP2 * dt2 + dP2 * ddt) * w[1]

    for n in range(2, maxn):
        alpha = A[n] * t + B[n]
        P3 = alpha * P2 + C[n] * P1
        dP3 = alpha * dP2 + C[n] * dP1 + A[n] * P2
        ddP3 = alpha * ddP2 + C[n] * ddP1 + 2 * A[n] * dP2
        a = a + (ddP3 * dt2 + dP3 * ddt) * w[n]
        P2, P1 = P3, P2
        dP2, dP1 = dP3, dP2
        ddP2, ddP1 = ddP3, ddP2
    return _as_result(a)
