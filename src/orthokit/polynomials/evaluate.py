r"""Three-term recurrence evaluation of orthonormal polynomial bases.

For a basis with recurrence coefficients :math:`A, B, C` and envelope
:math:`f` the members are

.. math::

    P_1 &= A_1 f(t), \\
    P_2 &= (A_2 t + B_2) P_1, \\
    P_n &= (A_n t + B_n) P_{n-1} + C_n P_{n-2}, \qquad n \geq 3.

Differentiating the recurrence gives

.. math::

    P_n' &= (A_n t + B_n) P_{n-1}' + C_n P_{n-2}' + A_n P_{n-1}, \\
    P_n'' &= (A_n t + B_n) P_{n-1}'' + C_n P_{n-2}'' + 2 A_n P_{n-1}'.

Two families of entry points are provided:

* ``*_into`` kernels write into caller-provided buffers and never allocate
  their results.
* :func:`evaluate`, :func:`evaluate_d`, :func:`evaluate_ed` and
  :func:`evaluate_dd` acquire their output from an
  :class:`~orthokit.utils.pool.ArrayPool` (the calling thread's pool by
  default). Callers may release the results to the pool when done. If
  evaluation raises, the acquired buffers go back to the pool before the
  exception propagates.

The evaluation point ``t`` may be a scalar, giving results of shape
``(maxn,)``, or an array, giving results of shape ``t.shape + (maxn,)``. The
basis index always runs along the last axis.

The value, derivative and joint kernels apply the same floating point
operations in the same order, so that ``evaluate_ed`` reproduces
``evaluate`` and ``evaluate_d`` exactly.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator

import numpy as np
from numpy.typing import ArrayLike

from orthokit.polynomials.envelope import envelope, envelope_d, envelope_dd
from orthokit.utils.pool import ArrayPool, resolve_pool
from orthokit.utils.validate import resolve_maxn, validate_buffer

if TYPE_CHECKING:
    from orthokit.polynomials.basis import OrthPolyBasis

__all__ = [
    "evaluate_into",
    "evaluate_d_into",
    "evaluate_ed_into",
    "evaluate_dd_into",
    "evaluate",
    "evaluate_d",
    "evaluate_ed",
    "evaluate_dd",
]


def _prepare(basis: OrthPolyBasis, t: ArrayLike, maxn: int | None) -> tuple[np.ndarray, int]:
    return np.asarray(t, dtype=np.float64), resolve_maxn(maxn, len(basis))


@contextmanager
def _released_on_error(pool: ArrayPool, *bufs: np.ndarray) -> Iterator[None]:
    """Returns ``bufs`` to ``pool`` if the body raises; on success the caller keeps them."""
    try:
        yield
    except BaseException:
        for buf in bufs:
            pool.release(buf)
        raise


def _fill_ed(P: np.ndarray, dP: np.ndarray, basis: OrthPolyBasis, t: np.ndarray, maxn: int) -> None:
    A, B, C = basis.A, basis.B, basis.C
    P[..., 0] = A[0] * envelope(basis.pl, basis.tl, basis.pr, basis.tr, t)
    dP[..., 0] = A[0] * envelope_d(basis.pl, basis.tl, basis.pr, basis.tr, t)
    if maxn == 1:
        return
    alpha = A[1] * t + B[1]
    P[..., 1] = alpha * P[..., 0]
    dP[..., 1] = alpha * dP[..., 0] + A[1] * P[..., 0]
    for n in range(2, maxn):
        alpha = A[n] * t + B[n]
        P[..., n] = alpha * P[..., n - 1] + C[n] * P[..., n - 2]
        dP[..., n] = alpha * dP[..., n - 1] + C[n] * dP[..., n - 2] + A[n] * P[..., n - 1]


def evaluate_into(
    P: np.ndarray,
    basis: OrthPolyBasis,
    t: ArrayLike,
    maxn: int | None = None,
) -> np.ndarray:
    """Writes the values ``P_1(t), ..., P_maxn(t)`` into ``P``.

    Args:
        P: Output buffer of shape ``t.shape + (n,)`` with ``n >= maxn``.
        basis: The polynomial basis.
        t: Evaluation point(s) in the transformed coordinate.
        maxn: Number of basis functions to evaluate; defaults to all.

    Returns:
        ``P``. Entries beyond ``maxn`` are left untouched.

    Raises:
        ValueError: If ``maxn`` exceeds the basis size or the buffer capacity.
    """
    t, maxn = _prepare(basis, t, maxn)
    validate_buffer(P, maxn, t.shape, "P")

    A, B, C = basis.A, basis.B, basis.C
    P[..., 0] = A[0] * envelope(basis.pl, basis.tl, basis.pr, basis.tr, t)
    if maxn == 1:
        return P
    P[..., 1] = (A[1] * t + B[1]) * P[..., 0]
    for n in range(2, maxn):
        P[..., n] = (A[n] * t + B[n]) * P[..., n - 1] + C[n] * P[..., n - 2]
    return P


def evaluate_ed_into(
    P: np.ndarray,
    dP: np.ndarray,
    basis: OrthPolyBasis,
    t: ArrayLike,
    maxn: int | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Writes values and first derivatives into ``P`` and ``dP`` in one sweep.

    Args:
        P: Output buffer for the values.
        dP: Output buffer for the derivatives with respect to ``t``.
        basis: The polynomial basis.
        t: Evaluation point(s).
        maxn: Number of basis functions to evaluate; defaults to all.

    Returns:
        The tuple ``(P, dP)``.
    """
    t, maxn = _prepare(basis, t, maxn)
    validate_buffer(P, maxn, t.shape, "P")
    validate_buffer(dP, maxn, t.shape, "dP")
    _fill_ed(P, dP, basis, t, maxn)
    return P, dP


def evaluate_d_into(
    dP: np.ndarray,
    basis: OrthPolyBasis,
    t: ArrayLike,
    maxn: int | None = None,
    *,
    pool: ArrayPool | None = None,
) -> np.ndarray:
    """Writes the first derivatives ``P_n'(t)`` into ``dP``.

    The undifferentiated values needed by the recurrence live in a scratch
    buffer borrowed from ``pool`` for the duration of the call.
    """
    t, maxn = _prepare(basis, t, maxn)
    validate_buffer(dP, maxn, t.shape, "dP")
    with resolve_pool(pool).scoped(t.shape + (maxn,)) as P:
        _fill_ed(P, dP, basis, t, maxn)
    return dP


def evaluate_dd_into(
    ddP: np.ndarray,
    basis: OrthPolyBasis,
    t: ArrayLike,
    maxn: int | None = None,
    *,
    pool: ArrayPool | None = None,
) -> np.ndarray:
    """Writes the second derivatives ``P_n''(t)`` into ``ddP``.

    Args:
        ddP: Output buffer of shape ``t.shape + (n,)`` with ``n >= maxn``.
        basis: The polynomial basis.
        t: Evaluation point(s).
        maxn: Number of basis functions to evaluate; defaults to all.
        pool: Pool providing the scratch buffers for values and first
            derivatives.

    Returns:
        ``ddP``.
    """
    t, maxn = _prepare(basis, t, maxn)
    validate_buffer(ddP, maxn, t.shape, "ddP")
    pool = resolve_pool(pool)
    shape = t.shape + (maxn,)
    with pool.scoped(shape) as P, pool.scoped(shape) as dP:
        A, B, C = basis.A, basis.B, basis.C
        _fill_ed(P, dP, basis, t, maxn)
        ddP[..., 0] = A[0] * envelope_dd(basis.pl, basis.tl, basis.pr, basis.tr, t)
        if maxn == 1:
            return ddP
        alpha = A[1] * t + B[1]
        ddP[..., 1] = alpha * ddP[..., 0] + 2 * A[1] * dP[..., 0]
        for n in range(2, maxn):
            alpha = A[n] * t + B[n]
            ddP[..., n] = (
                alpha * ddP[..., n - 1] + C[n] * ddP[..., n - 2] + 2 * A[n] * dP[..., n - 1]
            )
    return ddP


def evaluate(
    basis: OrthPolyBasis,
    t: ArrayLike,
    *,
    maxn: int | None = None,
    pool: ArrayPool | None = None,
) -> np.ndarray:
    """Evaluates the first ``maxn`` basis functions at ``t``.

    Args:
        basis: The polynomial basis.
        t: Evaluation point(s) in the transformed coordinate.
        maxn: Number of basis functions to evaluate; defaults to all.
        pool: Pool the result is acquired from; defaults to the calling
            thread's pool.

    Returns:
        Array of shape ``t.shape + (maxn,)``.
    """
    t, maxn = _prepare(basis, t, maxn)
    pool = resolve_pool(pool)
    P = pool.acquire(t.shape + (maxn,))
    with _released_on_error(pool, P):
        return evaluate_into(P, basis, t, maxn)


def evaluate_d(
    basis: OrthPolyBasis,
    t: ArrayLike,
    *,
    maxn: int | None = None,
    pool: ArrayPool | None = None,
) -> np.ndarray:
    """Evaluates the first derivatives of the first ``maxn`` basis functions."""
    t, maxn = _prepare(basis, t, maxn)
    pool = resolve_pool(pool)
    dP = pool.acquire(t.shape + (maxn,))
    with _released_on_error(pool, dP):
        return evaluate_d_into(dP, basis, t, maxn, pool=pool)


def evaluate_ed(
    basis: OrthPolyBasis,
    t: ArrayLike,
    *,
    maxn: int | None = None,
    pool: ArrayPool | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Evaluates values and first derivatives in a single pass.

    Returns:
        Tuple ``(P, dP)``, each of shape ``t.shape + (maxn,)``.
    """
    t, maxn = _prepare(basis, t, maxn)
    pool = resolve_pool(pool)
    P = pool.acquire(t.shape + (maxn,))
    dP = pool.acquire(t.shape + (maxn,))
    with _released_on_error(pool, P, dP):
        return evaluate_ed_into(P, dP, basis, t, maxn)


def evaluate_dd(
    basis: OrthPolyBasis,
    t: ArrayLike,
    *,
    maxn: int | None = None,
    pool: ArrayPool | None = None,
) -> np.ndarray:
    """Evaluates the second derivatives of the first ``maxn`` basis functions."""
    t, maxn = _prepare(basis, t, maxn)
    pool = resolve_pool(pool)
    ddP = pool.acquire(t.shape + (maxn,))
    with _released_on_error(pool, ddP):
        return evaluate_dd_into(ddP, basis, t, maxn, pool=pool)
