"""Configuration for quadrature-built radial bases.

:class:`BasisConfig` collects the parameters that define a radial basis
built from a quadrature grid, so that model setups can be stored next to
the rest of a potential's hyperparameters and rebuilt on demand.
"""

from __future__ import annotations

from typing import Any

from orthokit.polynomials.basis import OrthPolyBasis
from orthokit.polynomials.recurrence import QUADRATURE_RULES, discretize
from orthokit.transforms.transformed_basis import TransformedBasis, transformed_jacobi
from orthokit.transforms.transforms import DistanceTransform
from orthokit.utils.validate import validate_degree, validate_powers

__all__ = ["BasisConfig"]


class BasisConfig:
    """Configuration of a radial basis built on a quadrature grid."""

    def __init__(
        self,
        maxdeg: int,
        rcut: float,
        rin: float = 0.0,
        pcut: int = 2,
        pin: int = 0,
        num_quadrature_points: int = 1000,
        quadrature: str = "midpoint",
    ):
        """Initialize configuration.

        Args:
            maxdeg:
                Number of basis functions.

            rcut:
                Outer cutoff distance. The envelope vanishes there with
                power ``pcut``.

            rin:
                Inner cutoff distance. The envelope vanishes there with
                power ``pin``; ``pin = 0`` leaves the inner side free.

            pcut:
                Envelope power at the outer cutoff.

            pin:
                Envelope power at the inner cutoff.

            num_quadrature_points:
                Number of quadrature nodes in the transformed coordinate.
                The default of 1000 resolves the measure well beyond
                typical basis sizes of a few tens.

            quadrature:
                ``"midpoint"`` (equally spaced cell midpoints, uniform
                weights) or ``"gauss"`` (Gauss–Legendre nodes).

        Raises:
            ValueError: If a parameter is out of range.
            TypeError: If an integer parameter is not an integer.
        """
        self.maxdeg = validate_degree(maxdeg)
        powers = validate_powers(pcut=pcut, pin=pin)
        self.pcut = powers["pcut"]
        self.pin = powers["pin"]
        self.rcut = float(rcut)
        self.rin = float(rin)
        if self.rin == self.rcut:
            raise ValueError(f"rin and rcut must differ; got rin = rcut = {self.rcut}.")
        self.num_quadrature_points = validate_degree(num_quadrature_points)
        if quadrature not in QUADRATURE_RULES:
            raise ValueError(
                f"unknown quadrature rule {quadrature!r}; expected one of {QUADRATURE_RULES}."
            )
        self.quadrature = quadrature

    def to_dict(self) -> dict[str, Any]:
        """Returns the configuration as a plain dictionary."""
        return {
            "maxdeg": self.maxdeg,
            "rcut": self.rcut,
            "rin": self.rin,
            "pcut": self.pcut,
            "pin": self.pin,
            "num_quadrature_points": self.num_quadrature_points,
            "quadrature": self.quadrature,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> BasisConfig:
        """Creates a configuration from a dictionary produced by :meth:`to_dict`."""
        return cls(**d)

    def build(self, transform: DistanceTransform | None = None) -> OrthPolyBasis | TransformedBasis:
        """Builds the configured basis.

        Args:
            transform: Optional distance transform. Without it the basis
                lives directly on ``[rin, rcut]``.

        Returns:
            An :class:`OrthPolyBasis` if ``transform`` is ``None``, otherwise a
            :class:`TransformedBasis`.
        """
        if transform is None:
            return discretize(
                self.maxdeg,
                pcut=self.pcut,
                xcut=self.rcut,
                pin=self.pin,
                xin=self.rin,
                num_quadrature_points=self.num_quadrature_points,
                quadrature=self.quadrature,
            )
        return transformed_jacobi(
            self.maxdeg,
            transform,
            self.rcut,
            self.rin,
            pcut=self.pcut,
            pin=self.pin,
            num_quadrature_points=self.num_quadrature_points,
            quadrature=self.quadrature,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BasisConfig):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        args = ", ".join(f"{k}={v!r}" for k, v in self.to_dict().items())
        return f"BasisConfig({args})"
