"""Composition of a distance transform with an orthonormal polynomial basis."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike

from orthokit.autodiff.rules import rrule_evaluate, rrule_evaluate_d
from orthokit.polynomials.basis import OrthPolyBasis
from orthokit.polynomials.recurrence import discretize
from orthokit.transforms.transforms import DistanceTransform, validate_transform
from orthokit.utils.pool import ArrayPool

__all__ = [
    "TransformedBasis",
    "transformed_jacobi",
]


@dataclass(frozen=True, eq=True, repr=True)
class TransformedBasis:
    """A polynomial basis in physical distances, ``r -> P(trans(r))``.

    The wrapper has no state beyond the transform and the basis. Derivatives
    with respect to ``r`` follow from the chain rule with ``trans'(r)``;
    curvature is only available through :meth:`rrule_evaluate_d`, which
    feeds ``trans'(r)`` and ``trans''(r)`` into the second-order reverse rule.

    Attributes:
        transform: The distance transform ``r -> t``.
        basis: The polynomial basis in the transformed coordinate.
    """

    transform: DistanceTransform
    basis: OrthPolyBasis

    def __post_init__(self) -> None:
        """Validates the components."""
        validate_transform(self.transform)
        if not isinstance(self.basis, OrthPolyBasis):
            raise TypeError(f"basis must be an OrthPolyBasis; got {type(self.basis).__name__}.")

    __hash__ = None

    def __len__(self) -> int:
        return len(self.basis)

    def __call__(self, r: ArrayLike, **kwargs: Any) -> np.ndarray:
        return self.evaluate(r, **kwargs)

    def evaluate(self, r: ArrayLike, *, maxn: int | None = None, pool: ArrayPool | None = None) -> np.ndarray:
        """Evaluates the basis at the distance(s) ``r``."""
        return self.basis.evaluate(self.transform(r), maxn=maxn, pool=pool)

    def evaluate_d(self, r: ArrayLike, *, maxn: int | None = None, pool: ArrayPool | None = None) -> np.ndarray:
        """Evaluates the derivatives with respect to ``r``."""
        dP = self.basis.evaluate_d(self.transform(r), maxn=maxn, pool=pool)
        dP *= np.asarray(self.transform.derivative(r), dtype=np.float64)[..., np.newaxis]
        return dP

    def evaluate_ed(
        self, r: ArrayLike, *, maxn: int | None = None, pool: ArrayPool | None = None
    ) -> tuple[np.ndarray, np.ndarray]:
        """Evaluates values and derivatives with respect to ``r`` in one sweep."""
        P, dP = self.basis.evaluate_ed(self.transform(r), maxn=maxn, pool=pool)
        dP *= np.asarray(self.transform.derivative(r), dtype=np.float64)[..., np.newaxis]
        return P, dP

    def frule_evaluate(
        self, r: ArrayLike, dr: ArrayLike, *, maxn: int | None = None, pool: ArrayPool | None = None
    ) -> tuple[np.ndarray, np.ndarray]:
        """Pushes the tangent ``dr`` of the distance through transform and basis."""
        dt = np.asarray(self.transform.derivative(r), dtype=np.float64) * np.asarray(dr, dtype=np.float64)
        return self.basis.frule_evaluate(self.transform(r), dt, maxn=maxn, pool=pool)

    def rrule_evaluate(self, r: ArrayLike, w: ArrayLike) -> float | np.ndarray:
        """Returns ``sum_n w[n] * d/dr P_n(trans(r))``."""
        return rrule_evaluate(self.basis, self.transform(r), w) * self.transform.derivative(r)

    def rrule_evaluate_d(self, r: ArrayLike, w: ArrayLike) -> float | np.ndarray:
        """Returns ``sum_n w[n] * d^2/dr^2 P_n(trans(r))``."""
        return rrule_evaluate_d(
            self.basis,
            self.transform(r),
            w,
            self.transform.derivative(r),
            self.transform.second_derivative(r),
        )

    def to_dict(self) -> dict[str, Any]:
        """Returns the persisted-state record of this basis."""
        from orthokit.io.serialization import write_dict

        return write_dict(self)


def transformed_jacobi(
    maxdeg: int,
    transform: DistanceTransform,
    rcut: float,
    rin: float = 0.0,
    *,
    pcut: int = 2,
    pin: int = 0,
    num_quadrature_points: int = 1000,
    quadrature: str = "midpoint",
) -> TransformedBasis:
    """Builds a radial basis of Jacobi type in transformed distance coordinates.

    Args:
        maxdeg: Number of basis functions.
        transform: Distance transform, e.g. :class:`PolyTransform`.
        rcut: Outer cutoff distance.
        rin: Inner cutoff distance.
        pcut: Envelope power at the outer cutoff.
        pin: Envelope power at the inner cutoff.
        num_quadrature_points: Number of quadrature nodes in the transformed
            coordinate.
        quadrature: Quadrature rule, ``"midpoint"`` or ``"gauss"``.

    Returns:
        The :class:`TransformedBasis` combining ``transform`` with the
        polynomial basis.
    """
    validate_transform(transform)
    basis = discretize(
        maxdeg,
        pcut=pcut,
        xcut=rcut,
        pin=pin,
        xin=rin,
        num_quadrature_points=num_quadrature_points,
        transform=transform,
        quadrature=quadrature,
    )
    return TransformedBasis(transform, basis)
