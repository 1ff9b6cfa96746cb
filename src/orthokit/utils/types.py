"""Shared typing aliases for orthokit."""

from __future__ import annotations

from typing import TypeAlias

import numpy as np
from numpy.typing import NDArray

FloatArray: TypeAlias = NDArray[np.float64]
ScalarOrArray: TypeAlias = float | NDArray[np.float64]
