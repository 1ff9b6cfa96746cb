"""Orthonormal polynomial bases.

Provides the envelope factor, the construction of recurrence coefficients
from a discrete measure, the :class:`~orthokit.polynomials.basis.OrthPolyBasis`
value object and its evaluators.
"""
