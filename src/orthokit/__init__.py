"""Orthonormal polynomial radial bases for machine-learned interatomic potentials."""

from importlib.metadata import PackageNotFoundError, version

from orthokit.autodiff.rules import frule_evaluate, rrule_evaluate, rrule_evaluate_d
from orthokit.config import BasisConfig
from orthokit.io.serialization import load_json, read_dict, save_json, write_dict
from orthokit.polynomials.basis import OrthPolyBasis
from orthokit.polynomials.evaluate import evaluate, evaluate_d, evaluate_dd, evaluate_ed
from orthokit.polynomials.recurrence import build_orthpoly_basis, discretize, resize_basis
from orthokit.transforms.transformed_basis import TransformedBasis, transformed_jacobi
from orthokit.transforms.transforms import IdTransform, MorseTransform, PolyTransform
from orthokit.utils.pool import ArrayPool, default_pool
from orthokit.utils.sampling import rand_radial

try:
    __version__ = version("orthokit")
except PackageNotFoundError:
    pass

__all__ = [
    "ArrayPool",
    "BasisConfig",
    "IdTransform",
    "MorseTransform",
    "OrthPolyBasis",
    "PolyTransform",
    "TransformedBasis",
    "build_orthpoly_basis",
    "default_pool",
    "discretize",
    "evaluate",
    "evaluate_d",
    "evaluate_dd",
    "evaluate_ed",
    "frule_evaluate",
    "load_json",
    "rand_radial",
    "read_dict",
    "resize_basis",
    "rrule_evaluate",
    "rrule_evaluate_d",
    "save_json",
    "transformed_jacobi",
    "write_dict",
]
