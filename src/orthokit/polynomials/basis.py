"""Immutable value object for orthonormal polynomial bases with an envelope."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike

from orthokit.autodiff.rules import frule_evaluate, rrule_evaluate, rrule_evaluate_d
from orthokit.polynomials.evaluate import evaluate, evaluate_d, evaluate_dd, evaluate_ed
from orthokit.utils.pool import ArrayPool
from orthokit.utils.validate import validate_powers

__all__ = ["OrthPolyBasis"]


def _frozen_array(x: ArrayLike, name: str) -> np.ndarray:
    arr = np.array(x, dtype=np.float64)
    if arr.ndim != 1:
        raise ValueError(f"{name} must be 1D; got shape {arr.shape}.")
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True, eq=False, repr=False)
class OrthPolyBasis:
    r"""Orthonormal polynomials with an envelope, defined by recurrence coefficients.

    The members are

    .. math::

        J_1(t) &= A_1 (t - t_l)^{p_l} (t - t_r)^{p_r}, \\
        J_2(t) &= (A_2 t + B_2) J_1(t), \\
        J_n(t) &= (A_n t + B_n) J_{n-1}(t) + C_n J_{n-2}(t),

    orthonormal with respect to the discrete measure ``(tdf, ww)`` used to
    construct them. Python index ``n - 1`` holds member :math:`J_n`.

    Instances are normally produced by
    :func:`~orthokit.polynomials.recurrence.build_orthpoly_basis` or
    :func:`~orthokit.polynomials.recurrence.discretize`. They are read-only
    and can be shared freely between threads.

    Two bases compare equal when their envelopes and recurrence coefficients
    agree; the sample points and weights are not compared.

    Attributes:
        pl: Envelope power at the left boundary.
        tl: Left boundary in the transformed coordinate.
        pr: Envelope power at the right boundary.
        tr: Right boundary in the transformed coordinate.
        A: Recurrence coefficients multiplying ``t``.
        B: Constant recurrence coefficients.
        C: Coefficients of the second-previous member (zero for ``n < 3``).
        tdf: Sample points of the measure.
        ww: Normalized weights of the measure.
    """

    pl: int
    tl: float
    pr: int
    tr: float
    A: np.ndarray
    B: np.ndarray
    C: np.ndarray
    tdf: np.ndarray
    ww: np.ndarray

    def __post_init__(self) -> None:
        """Validates and freezes the fields."""
        powers = validate_powers(pl=self.pl, pr=self.pr)
        tl, tr = float(self.tl), float(self.tr)
        if tl > tr:
            raise ValueError(f"boundaries must satisfy tl <= tr; got tl={tl}, tr={tr}.")

        A = _frozen_array(self.A, "A")
        B = _frozen_array(self.B, "B")
        C = _frozen_array(self.C, "C")
        if not (A.size == B.size == C.size) or A.size == 0:
            raise ValueError(
                f"A, B, C must be non-empty and of equal length; got {A.size}, {B.size}, {C.size}."
            )
        if np.any(A == 0) or not np.all(np.isfinite(A)):
            raise ValueError("recurrence coefficients A must be finite and non-zero.")

        tdf = _frozen_array(self.tdf, "tdf")
        ww = _frozen_array(self.ww, "ww")
        if tdf.shape != ww.shape:
            raise ValueError(f"tdf and ww must have equal length; got {tdf.size} and {ww.size}.")
        if np.any(ww < 0) or not np.isclose(np.sum(ww), 1.0, rtol=0.0, atol=1e-10):
            raise ValueError("ww must be non-negative and sum to one.")

        for name, value in (
            ("pl", powers["pl"]), ("tl", tl), ("pr", powers["pr"]), ("tr", tr),
            ("A", A), ("B", B), ("C", C), ("tdf", tdf), ("ww", ww),
        ):
            object.__setattr__(self, name, value)

    def __len__(self) -> int:
        return self.A.size

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrthPolyBasis):
            return NotImplemented
        return (
            self.pl == other.pl
            and self.tl == other.tl
            and self.pr == other.pr
            and self.tr == other.tr
            and np.array_equal(self.A, other.A)
            and np.array_equal(self.B, other.B)
            and np.array_equal(self.C, other.C)
        )

    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"OrthPolyBasis(pl={self.pl}, tl={self.tl}, pr={self.pr}, tr={self.tr}, "
            f"N={len(self)})"
        )

    def __call__(self, t: ArrayLike, **kwargs: Any) -> np.ndarray:
        return self.evaluate(t, **kwargs)

    def evaluate(self, t: ArrayLike, *, maxn: int | None = None, pool: ArrayPool | None = None) -> np.ndarray:
        """See :func:`orthokit.polynomials.evaluate.evaluate`."""
        return evaluate(self, t, maxn=maxn, pool=pool)

    def evaluate_d(self, t: ArrayLike, *, maxn: int | None = None, pool: ArrayPool | None = None) -> np.ndarray:
        """See :func:`orthokit.polynomials.evaluate.evaluate_d`."""
        return evaluate_d(self, t, maxn=maxn, pool=pool)

    def evaluate_ed(
        self, t: ArrayLike, *, maxn: int | None = None, pool: ArrayPool | None = None
    ) -> tuple[np.ndarray, np.ndarray]:
        """See :func:`orthokit.polynomials.evaluate.evaluate_ed`."""
        return evaluate_ed(self, t, maxn=maxn, pool=pool)

    def evaluate_dd(self, t: ArrayLike, *, maxn: int | None = None, pool: ArrayPool | None = None) -> np.ndarray:
        """See :func:`orthokit.polynomials.evaluate.evaluate_dd`."""
        return evaluate_dd(self, t, maxn=maxn, pool=pool)

    def frule_evaluate(
        self, t: ArrayLike, dt: ArrayLike, *, maxn: int | None = None, pool: ArrayPool | None = None
    ) -> tuple[np.ndarray, np.ndarray]:
        """See :func:`orthokit.autodiff.rules.frule_evaluate`."""
        return frule_evaluate(self, t, dt, maxn=maxn, pool=pool)

    def rrule_evaluate(self, t: ArrayLike, w: ArrayLike) -> float | np.ndarray:
        """See :func:`orthokit.autodiff.rules.rrule_evaluate`."""
        return rrule_evaluate(self, t, w)

    def rrule_evaluate_d(
        self, t: ArrayLike, w: ArrayLike, dt: ArrayLike = 1.0, ddt: ArrayLike = 0.0
    ) -> float | np.ndarray:
        """See :func:`orthokit.autodiff.rules.rrule_evaluate_d`."""
        return rrule_evaluate_d(self, t, w, dt, ddt)

    def to_dict(self) -> dict[str, Any]:
        """Returns the persisted-state record of this basis."""
        from orthokit.io.serialization import write_dict

        return write_dict(self)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> OrthPolyBasis:
        """Rebuilds a basis from a record produced by :meth:`to_dict`."""
        from orthokit.io.serialization import read_dict

        obj = read_dict(d)
        if not isinstance(obj, cls):
            raise ValueError(f"record does not describe an {cls.__name__}; got {type(obj).__name__}.")
        return obj
