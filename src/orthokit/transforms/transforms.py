r"""Distance transforms ``r -> x`` used to reparametrize radial bases.

A transform concentrates the resolution of a polynomial basis where it is
most useful, typically close to the nearest-neighbour distance. Every
transform provides its value, its first and second derivatives (closed form)
and its inverse.

* :class:`IdTransform`: :math:`x = r`.
* :class:`PolyTransform`: :math:`x = ((1 + r_0) / (1 + r))^p`.
* :class:`MorseTransform`: :math:`x = \exp(-\lambda (r / r_0 - 1))`.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import numpy as np
from numpy.typing import ArrayLike

__all__ = [
    "DistanceTransform",
    "IdTransform",
    "PolyTransform",
    "MorseTransform",
    "validate_transform",
]


def _out(x):
    return x[()] if np.ndim(x) == 0 else x


@runtime_checkable
class DistanceTransform(Protocol):
    """Protocol every distance transform must satisfy."""

    def __call__(self, r: ArrayLike) -> Any:
        """Maps the distance ``r`` to the transformed coordinate."""
        ...

    def derivative(self, r: ArrayLike) -> Any:
        """First derivative with respect to ``r``."""
        ...

    def second_derivative(self, r: ArrayLike) -> Any:
        """Second derivative with respect to ``r``."""
        ...

    def inverse(self, x: ArrayLike) -> Any:
        """Maps a transformed coordinate back to a distance."""
        ...

    def to_dict(self) -> dict[str, Any]:
        """Returns the persisted-state record of the transform."""
        ...


def validate_transform(transform: Any) -> DistanceTransform:
    """Checks that ``transform`` implements :class:`DistanceTransform`.

    Raises:
        TypeError: If a method of the protocol is missing.
    """
    if not isinstance(transform, DistanceTransform):
        raise TypeError(
            f"{type(transform).__name__} does not implement the distance transform "
            "protocol (__call__, derivative, second_derivative, inverse, to_dict)."
        )
    return transform


class IdTransform:
    """The identity transform ``x = r``."""

    def __call__(self, r: ArrayLike) -> Any:
        return _out(np.asarray(r, dtype=np.float64))

    def derivative(self, r: ArrayLike) -> Any:
        return _out(np.ones_like(np.asarray(r, dtype=np.float64)))

    def second_derivative(self, r: ArrayLike) -> Any:
        return _out(np.zeros_like(np.asarray(r, dtype=np.float64)))

    def inverse(self, x: ArrayLike) -> Any:
        return _out(np.asarray(x, dtype=np.float64))

    def to_dict(self) -> dict[str, Any]:
        return {"__id__": "orthokit_IdTransform"}

    def __eq__(self, other: object) -> bool:
        return isinstance(other, IdTransform)

    def __hash__(self) -> int:
        return hash(IdTransform)

    def __repr__(self) -> str:
        return "IdTransform()"


class PolyTransform:
    """Rational power transform ``x = ((1 + r0) / (1 + r))^p``.

    Maps ``r = r0`` to ``x = 1`` and decreases monotonically to zero as ``r``
    grows, which spreads out the short-distance region.

    Attributes:
        p: Positive power.
        r0: Reference distance, typically the nearest-neighbour distance.
    """

    def __init__(self, p: float, r0: float) -> None:
        """Initializes the transform.

        Raises:
            ValueError: If ``p <= 0`` or ``r0 <= -1``.
        """
        if p <= 0:
            raise ValueError(f"PolyTransform power must be positive; got p={p}.")
        if r0 <= -1:
            raise ValueError(f"PolyTransform requires r0 > -1; got r0={r0}.")
        self.p = p
        self.r0 = float(r0)

    def __call__(self, r: ArrayLike) -> Any:
        r = np.asarray(r, dtype=np.float64)
        return _out(((1 + self.r0) / (1 + r)) ** self.p)

    def derivative(self, r: ArrayLike) -> Any:
        r = np.asarray(r, dtype=np.float64)
        return _out(-self.p / (1 + r) * ((1 + self.r0) / (1 + r)) ** self.p)

    def second_derivative(self, r: ArrayLike) -> Any:
        r = np.asarray(r, dtype=np.float64)
        return _out(self.p * (self.p + 1) / (1 + r) ** 2 * ((1 + self.r0) / (1 + r)) ** self.p)

    def inverse(self, x: ArrayLike) -> Any:
        x = np.asarray(x, dtype=np.float64)
        return _out((1 + self.r0) / x ** (1 / self.p) - 1)

    def to_dict(self) -> dict[str, Any]:
        return {"__id__": "orthokit_PolyTransform", "p": self.p, "r0": self.r0}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PolyTransform):
            return NotImplemented
        return self.p == other.p and self.r0 == other.r0

    def __hash__(self) -> int:
        return hash((PolyTransform, self.p, self.r0))

    def __repr__(self) -> str:
        return f"PolyTransform(p={self.p}, r0={self.r0})"


class MorseTransform:
    """Exponential transform ``x = exp(-lam * (r / r0 - 1))``.

    Attributes:
        lam: Positive decay rate.
        r0: Positive reference distance, mapped to ``x = 1``.
    """

    def __init__(self, lam: float, r0: float) -> None:
        """Initializes the transform.

        Raises:
            ValueError: If ``lam <= 0`` or ``r0 <= 0``.
        """
        if lam <= 0:
            raise ValueError(f"MorseTransform requires lam > 0; got lam={lam}.")
        if r0 <= 0:
            raise ValueError(f"MorseTransform requires r0 > 0; got r0={r0}.")
        self.lam = float(lam)
        self.r0 = float(r0)

    def __call__(self, r: ArrayLike) -> Any:
        r = np.asarray(r, dtype=np.float64)
        return _out(np.exp(-self.lam * (r / self.r0 - 1)))

    def derivative(self, r: ArrayLike) -> Any:
        return _out(-self.lam / self.r0 * np.asarray(self(r)))

    def second_derivative(self, r: ArrayLike) -> Any:
        return _out((self.lam / self.r0) ** 2 * np.asarray(self(r)))

    def inverse(self, x: ArrayLike) -> Any:
        x = np.asarray(x, dtype=np.float64)
        return _out(self.r0 * (1 - np.log(x) / self.lam))

    def to_dict(self) -> dict[str, Any]:
        return {"__id__": "orthokit_MorseTransform", "lam": self.lam, "r0": self.r0}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MorseTransform):
            return NotImplemented
        return self.lam == other.lam and self.r0 == other.r0

    def __hash__(self) -> int:
        return hash((MorseTransform, self.lam, self.r0))

    def __repr__(self) -> str:
        return f"MorseTransform(lam={self.lam}, r0={self.r0})"
