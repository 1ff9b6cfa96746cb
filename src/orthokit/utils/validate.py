"""Validation utilities for orthokit."""

from __future__ import annotations

import numbers

import numpy as np
from numpy.typing import ArrayLike

from orthokit.utils.types import FloatArray

__all__ = [
    "validate_degree",
    "validate_powers",
    "validate_measure",
    "resolve_maxn",
    "validate_buffer",
    "validate_cotangent",
]


def validate_degree(N) -> int:
    """Validates the size of a polynomial family.

    Args:
        N: Requested number of basis functions.

    Returns:
        ``N`` as a Python ``int``.

    Raises:
        TypeError: If ``N`` is not an integer.
        ValueError: If ``N <= 0``.
    """
    if isinstance(N, bool) or not isinstance(N, numbers.Integral):
        raise TypeError(f"basis size N must be an integer; got {N!r}.")
    if N <= 0:
        raise ValueError(f"basis size N must be positive; got N={N}.")
    return int(N)


def validate_powers(**powers) -> dict[str, int]:
    """Validates envelope powers passed as keyword arguments.

    Args:
        **powers: Named powers, e.g. ``pcut=2, pin=0``.

    Returns:
        The powers converted to ``int``, under the same names.

    Raises:
        TypeError: If a power is not an integer.
        ValueError: If a power is negative.
    """
    out = {}
    for name, p in powers.items():
        if isinstance(p, bool) or not isinstance(p, numbers.Integral):
            raise TypeError(f"envelope power {name} must be an integer; got {p!r}.")
        if p < 0:
            raise ValueError(f"envelope power {name} must be non-negative; got {name}={p}.")
        out[name] = int(p)
    return out


def validate_measure(
    tdf: ArrayLike,
    ww: ArrayLike | None = None,
) -> tuple[FloatArray, FloatArray]:
    """Validates a discretized measure and normalizes its weights.

    Args:
        tdf: Sample points, 1D.
        ww: Non-negative weights, same length as ``tdf``. ``None`` means
            uniform weights.

    Returns:
        Tuple ``(tdf, ww)`` as float64 arrays with ``ww`` summing to one.

    Raises:
        ValueError: If the samples are empty, not 1D or not finite, if the
            lengths differ, or if the weights are negative, not finite, or
            have a non-positive total.
    """
    tdf_arr = np.array(tdf, dtype=np.float64)
    if tdf_arr.ndim != 1:
        raise ValueError(f"sample points must be 1D; got ndim={tdf_arr.ndim}.")
    if tdf_arr.size == 0:
        raise ValueError("at least one sample point is required.")
    if not np.all(np.isfinite(tdf_arr)):
        raise ValueError("sample points must be finite.")

    if ww is None:
        ww_arr = np.ones_like(tdf_arr)
    else:
        ww_arr = np.array(ww, dtype=np.float64)
        if ww_arr.shape != tdf_arr.shape:
            raise ValueError(
                f"weights must match the sample points; got {ww_arr.shape} weights "
                f"for {tdf_arr.shape} samples."
            )
    if not np.all(np.isfinite(ww_arr)):
        raise ValueError("weights must be finite.")
    if np.any(ww_arr < 0):
        raise ValueError("weights must be non-negative.")

    total = float(np.sum(ww_arr))
    if total <= 0:
        raise ValueError(f"total weight must be positive; got {total}.")
    return tdf_arr, ww_arr / total


def resolve_maxn(maxn: int | None, N: int) -> int:
    """Resolves the prefix length of an evaluation.

    Args:
        maxn: Requested prefix length, or ``None`` for the full basis.
        N: Size of the basis.

    Returns:
        The prefix length.

    Raises:
        ValueError: If ``maxn`` is outside ``1..N``.
    """
    if maxn is None:
        return N
    if isinstance(maxn, bool) or not isinstance(maxn, numbers.Integral):
        raise TypeError(f"maxn must be an integer; got {maxn!r}.")
    if maxn < 1 or maxn > N:
        raise ValueError(f"maxn must lie in 1..{N} (basis size); got maxn={maxn}.")
    return int(maxn)


def validate_buffer(buf: np.ndarray, maxn: int, lead_shape: tuple[int, ...], name: str = "buffer") -> None:
    """Checks that an output buffer can hold a prefix of length ``maxn``.

    Args:
        buf: Output array; the basis index runs along the last axis.
        maxn: Prefix length to be written.
        lead_shape: Required shape of all axes but the last one (the shape of
            the evaluation points).
        name: Name used in error messages.

    Raises:
        ValueError: If the buffer has the wrong leading shape or too small a
            capacity.
    """
    if not isinstance(buf, np.ndarray):
        raise TypeError(f"{name} must be a numpy array; got {type(buf).__name__}.")
    if buf.ndim != len(lead_shape) + 1 or buf.shape[:-1] != tuple(lead_shape):
        raise ValueError(
            f"{name} must have shape {tuple(lead_shape)} + (n,); got {buf.shape}."
        )
    if buf.shape[-1] < maxn:
        raise ValueError(
            f"{name} capacity {buf.shape[-1]} is smaller than maxn={maxn}."
        )


def validate_cotangent(w: ArrayLike, N: int) -> FloatArray:
    """Validates a cotangent vector for the reverse rules.

    Args:
        w: One weight per basis function; its length sets the prefix.
        N: Size of the basis.

    Returns:
        ``w`` as a 1D float64 array.

    Raises:
        ValueError: If ``w`` is not 1D, is empty or is longer than the basis.
    """
    w_arr = np.asarray(w, dtype=np.float64)
    if w_arr.ndim != 1:
        raise ValueError(f"cotangent must be 1D; got shape {w_arr.shape}.")
    if w_arr.size == 0 or w_arr.size > N:
        raise ValueError(
            f"cotangent length must lie in 1..{N} (basis size); got {w_arr.size}."
        )
    return w_arr
