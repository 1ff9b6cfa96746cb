"""Optional JAX support for orthokit.

JAX is an optional dependency. This module imports it when available and
exposes :func:`require_jax` so that JAX-only entry points fail with an
installation hint instead of an ``AttributeError`` on ``None``.
"""

from __future__ import annotations

from typing import Any

try:
    import jax
    import jax.numpy as jnp
except ImportError:
    jax = None
    jnp = None
    _HAS_JAX = False
else:
    _HAS_JAX = True

has_jax: bool = _HAS_JAX

__all__ = [
    "AutodiffUnavailable",
    "as_jax_points",
    "has_jax",
    "require_jax",
]


class AutodiffUnavailable(RuntimeError):
    """Raised when a JAX entry point is used without JAX installed."""


def require_jax() -> None:
    """Raises if JAX is not available.

    Raises:
        AutodiffUnavailable: If JAX is not installed.
    """
    if not _HAS_JAX:
        raise AutodiffUnavailable(
            "JAX evaluation of orthokit bases requires `jax` + `jaxlib`.\n"
            'Install with `pip install "orthokit[jax]"` '
            "(or follow JAX's official install instructions for GPU)."
        )


def as_jax_points(t: Any) -> "jnp.ndarray":
    """Converts evaluation points to a floating JAX array.

    Integer input is promoted to the default floating type, so that
    ``t = 0`` and ``t = 0.0`` trace identically.

    Raises:
        TypeError: If ``t`` is complex.
    """
    arr = jnp.asarray(t)
    if jnp.issubdtype(arr.dtype, jnp.complexfloating):
        raise TypeError(f"evaluation points must be real; got dtype {arr.dtype}.")
    if not jnp.issubdtype(arr.dtype, jnp.floating):
        arr = arr.astype(jnp.result_type(float))
    return arr
