"""Persistence of bases and transforms as plain dictionaries and JSON files.

Every persistable object maps to a dictionary carrying a type tag under
``"__id__"``. :func:`read_dict` dispatches on that tag; new types can be
added with :func:`register_type`.

The record of an :class:`~orthokit.polynomials.basis.OrthPolyBasis` is::

    {
        "__id__": "orthokit_OrthPolyBasis",
        "T": "float64",
        "pl": ..., "tl": ..., "pr": ..., "tr": ...,
        "A": [...], "B": [...], "C": [...],
        "tdf": [...], "ww": [...],
    }
"""

from __future__ import annotations

import json
import os
from collections.abc import Callable
from typing import Any

import numpy as np

from orthokit.polynomials.basis import OrthPolyBasis
from orthokit.transforms.transformed_basis import TransformedBasis
from orthokit.transforms.transforms import IdTransform, MorseTransform, PolyTransform

__all__ = [
    "write_dict",
    "read_dict",
    "register_type",
    "save_json",
    "load_json",
]

_BASIS_TAG = "orthokit_OrthPolyBasis"
_TRANSFORMED_TAG = "orthokit_TransformedBasis"


def _require(d: dict[str, Any], *keys: str) -> None:
    missing = [k for k in keys if k not in d]
    if missing:
        raise ValueError(f"record {d.get('__id__')!r} is missing fields {missing}.")


def _write_basis(basis: OrthPolyBasis) -> dict[str, Any]:
    return {
        "__id__": _BASIS_TAG,
        "T": str(basis.A.dtype),
        "pl": basis.pl,
        "tl": basis.tl,
        "pr": basis.pr,
        "tr": basis.tr,
        "A": basis.A.tolist(),
        "B": basis.B.tolist(),
        "C": basis.C.tolist(),
        "tdf": basis.tdf.tolist(),
        "ww": basis.ww.tolist(),
    }


def _read_basis(d: dict[str, Any]) -> OrthPolyBasis:
    _require(d, "pl", "tl", "pr", "tr", "A", "B", "C", "tdf", "ww")
    T = np.dtype(d.get("T", "float64"))
    if T != np.float64:
        raise ValueError(f"only float64 bases are supported; got T={T}.")
    return OrthPolyBasis(
        d["pl"], d["tl"], d["pr"], d["tr"],
        np.asarray(d["A"], dtype=T), np.asarray(d["B"], dtype=T), np.asarray(d["C"], dtype=T),
        np.asarray(d["tdf"], dtype=T), np.asarray(d["ww"], dtype=T),
    )


def _read_transformed(d: dict[str, Any]) -> TransformedBasis:
    _require(d, "transform", "basis")
    return TransformedBasis(read_dict(d["transform"]), read_dict(d["basis"]))


def _read_poly(d: dict[str, Any]) -> PolyTransform:
    _require(d, "p", "r0")
    return PolyTransform(d["p"], d["r0"])


def _read_morse(d: dict[str, Any]) -> MorseTransform:
    _require(d, "lam", "r0")
    return MorseTransform(d["lam"], d["r0"])


_READERS: dict[str, Callable[[dict[str, Any]], Any]] = {
    _BASIS_TAG: _read_basis,
    _TRANSFORMED_TAG: _read_transformed,
    "orthokit_IdTransform": lambda d: IdTransform(),
    "orthokit_PolyTransform": _read_poly,
    "orthokit_MorseTransform": _read_morse,
}


def register_type(tag: str, reader: Callable[[dict[str, Any]], Any]) -> None:
    """Registers a reader for records tagged ``tag``.

    Objects of the new type must provide ``to_dict()`` producing a record
    with ``"__id__": tag``.

    Args:
        tag: Type tag stored under ``"__id__"``.
        reader: Callable rebuilding the object from its record.
    """
    _READERS[tag] = reader


def write_dict(obj: Any) -> dict[str, Any]:
    """Converts a basis or transform into its persisted-state record.

    Raises:
        TypeError: If ``obj`` cannot be serialized.
    """
    if isinstance(obj, OrthPolyBasis):
        return _write_basis(obj)
    if isinstance(obj, TransformedBasis):
        return {
            "__id__": _TRANSFORMED_TAG,
            "transform": write_dict(obj.transform),
            "basis": write_dict(obj.basis),
        }
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    raise TypeError(f"cannot serialize objects of type {type(obj).__name__}.")


def read_dict(d: dict[str, Any]) -> Any:
    """Rebuilds an object from its persisted-state record.

    Raises:
        ValueError: If the record has no or an unknown ``"__id__"`` tag, or
            misses required fields.
    """
    if not isinstance(d, dict) or "__id__" not in d:
        raise ValueError("record must be a dict with an '__id__' type tag.")
    reader = _READERS.get(d["__id__"])
    if reader is None:
        raise ValueError(f"unknown record type {d['__id__']!r}; known types: {sorted(_READERS)}.")
    return reader(d)


def save_json(obj: Any, path: str | os.PathLike) -> None:
    """Writes the record of ``obj`` to a JSON file."""
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(write_dict(obj), fh)


def load_json(path: str | os.PathLike) -> Any:
    """Reads an object from a JSON file written by :func:`save_json`."""
    with open(path, encoding="utf-8") as fh:
        return read_dict(json.load(fh))
