"""Distance transforms and transformed polynomial bases."""

from orthokit.transforms.transformed_basis import TransformedBasis, transformed_jacobi
from orthokit.transforms.transforms import (
    DistanceTransform,
    IdTransform,
    MorseTransform,
    PolyTransform,
)

__all__ = [
    "DistanceTransform",
    "IdTransform",
    "MorseTransform",
    "PolyTransform",
    "TransformedBasis",
    "transformed_jacobi",
]
