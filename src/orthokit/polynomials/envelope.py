r"""Power-law envelope (cutoff) factor of the orthonormal polynomial bases.

The envelope is

.. math::

    f(t) = (t - t_l)^{p_l} (t - t_r)^{p_r},

and it is set to zero outside of :math:`[t_l, t_r]` on every side whose power
is strictly positive. A power of zero places no constraint on that side, so
the envelope extrapolates freely there.

Derivatives are the closed-form derivatives of the product of monomials.
Monomials whose exponent would become negative are dropped, which keeps the
derivatives finite at the boundaries.

All functions accept scalars or arrays and act element-wise. The ``xp``
argument selects the array namespace (``numpy`` by default, ``jax.numpy`` for
the JAX evaluator).
"""

from __future__ import annotations

from typing import Any

import numpy as np

__all__ = [
    "envelope",
    "envelope_d",
    "envelope_dd",
]


def _as_float(t: Any, xp: Any) -> Any:
    """Converts ``t`` to a floating point array of the namespace ``xp``."""
    if xp is np:
        return np.asarray(t, dtype=np.float64)
    return xp.asarray(t)


def _mono(x: Any, p: int, xp: Any) -> Any:
    """Returns ``x**p``, or zeros if ``p`` is negative."""
    if p < 0:
        return xp.zeros_like(x)
    return x**p


def _mask_outside(pl: int, tl: float, pr: int, tr: float, t: Any, val: Any, xp: Any) -> Any:
    """Zeros ``val`` wherever ``t`` leaves the domain on a constrained side."""
    if pl > 0:
        val = xp.where(t < tl, xp.zeros_like(val), val)
    if pr > 0:
        val = xp.where(t > tr, xp.zeros_like(val), val)
    if xp is np and np.ndim(val) == 0:
        return val[()]
    return val


def envelope(pl: int, tl: float, pr: int, tr: float, t: Any, xp: Any = np) -> Any:
    """Evaluates the envelope :math:`(t - t_l)^{p_l} (t - t_r)^{p_r}`.

    Args:
        pl: Power at the left boundary (non-negative).
        tl: Left boundary in the transformed coordinate.
        pr: Power at the right boundary (non-negative).
        tr: Right boundary in the transformed coordinate.
        t: Evaluation point(s).
        xp: Array namespace.

    Returns:
        Envelope value(s) with the shape of ``t``.
    """
    t = _as_float(t, xp)
    val = _mono(t - tl, pl, xp) * _mono(t - tr, pr, xp)
    return _mask_outside(pl, tl, pr, tr, t, val, xp)


def envelope_d(pl: int, tl: float, pr: int, tr: float, t: Any, xp: Any = np) -> Any:
    """Evaluates the first derivative of :func:`envelope` with respect to ``t``."""
    t = _as_float(t, xp)
    sl = t - tl
    sr = t - tr
    val = (
        pl * _mono(sl, pl - 1, xp) * _mono(sr, pr, xp)
        + pr * _mono(sl, pl, xp) * _mono(sr, pr - 1, xp)
    )
    return _mask_outside(pl, tl, pr, tr, t, val, xp)


def envelope_dd(pl: int, tl: float, pr: int, tr: float, t: Any, xp: Any = np) -> Any:
    """Evaluates the second derivative of :func:`envelope` with respect to ``t``."""
    t = _as_float(t, xp)
    sl = t - tl
    sr = t - tr
    val = (
        pl * (pl - 1) * _mono(sl, pl - 2, xp) * _mono(sr, pr, xp)
        + 2 * pl * pr * _mono(sl, pl - 1, xp) * _mono(sr, pr - 1, xp)
        + pr * (pr - 1) * _mono(sl, pl, xp) * _mono(sr, pr - 2, xp)
    )
    return _mask_outside(pl, tl, pr, tr, t, val, xp)
