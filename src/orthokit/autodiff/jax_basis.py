"""JAX-traceable evaluation of orthonormal polynomial bases.

:func:`jax_evaluator` turns an :class:`~orthokit.polynomials.basis.OrthPolyBasis`
into a JAX function ``t -> P(t)``. Its derivative is supplied through
``jax.custom_jvp`` using the forward rule ``dP(t) * t_dot``, so the basis can
sit inside a larger JAX model (energies, forces, virials) and be combined
with ``jax.grad``, ``jax.jacfwd``, ``jax.jacrev`` and ``jax.vmap``.

Example:
--------

    >>> import jax
    >>> from orthokit.polynomials.recurrence import discretize
    >>> from orthokit.autodiff.jax_basis import jax_evaluator
    >>> basis = discretize(5, pcut=2, pin=0, num_quadrature_points=200)
    >>> f = jax_evaluator(basis)
    >>> jax.jacfwd(f)(0.3).shape
    (5,)

Notes:
------

- Requires the JAX extra: ``pip install "orthokit[jax]"``.
- Enable ``jax_enable_x64`` to match the float64 numpy evaluators.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from orthokit.autodiff.jax_utils import as_jax_points, jax, jnp, require_jax
from orthokit.polynomials.envelope import envelope, envelope_d
from orthokit.utils.validate import resolve_maxn

if TYPE_CHECKING:
    from orthokit.polynomials.basis import OrthPolyBasis

__all__ = ["jax_evaluator"]


def jax_evaluator(basis: OrthPolyBasis, maxn: int | None = None) -> Callable:
    """Builds a JAX-differentiable evaluator of the first ``maxn`` basis functions.

    Args:
        basis: The polynomial basis.
        maxn: Number of basis functions; defaults to all.

    Returns:
        A function mapping ``t`` (scalar or array) to an array of shape
        ``t.shape + (maxn,)``.

    Raises:
        AutodiffUnavailable: If JAX is not installed.
        ValueError: If ``maxn`` exceeds the basis size.
    """
    require_jax()
    maxn = resolve_maxn(maxn, len(basis))
    pl, tl, pr, tr = basis.pl, basis.tl, basis.pr, basis.tr
    A = [float(a) for a in basis.A[:maxn]]
    B = [float(b) for b in basis.B[:maxn]]
    C = [float(c) for c in basis.C[:maxn]]

    def values_and_derivatives(t):
        P = [A[0] * envelope(pl, tl, pr, tr, t, xp=jnp)]
        dP = [A[0] * envelope_d(pl, tl, pr, tr, t, xp=jnp)]
        if maxn > 1:
            alpha = A[1] * t + B[1]
            P.append(alpha * P[0])
            dP.append(alpha * dP[0] + A[1] * P[0])
        for n in range(2, maxn):
            alpha = A[n] * t + B[n]
            P.append(alpha * P[n - 1] + C[n] * P[n - 2])
            dP.append(alpha * dP[n - 1] + C[n] * dP[n - 2] + A[n] * P[n - 1])
        return jnp.stack(P, axis=-1), jnp.stack(dP, axis=-1)

    @jax.custom_jvp
    def evaluate(t):
        return values_and_derivatives(as_jax_points(t))[0]

    @evaluate.defjvp
    def evaluate_jvp(primals, tangents):
        (t,), (t_dot,) = primals, tangents
        P, dP = values_and_derivatives(as_jax_points(t))
        return P, dP * jnp.expand_dims(t_dot, -1)

    return evaluate
