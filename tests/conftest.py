"""Pytest configuration with shared basis fixtures."""

import os
from concurrent.futures import ThreadPoolExecutor, TimeoutError

import pytest

from orthokit.polynomials.recurrence import discretize
from orthokit.transforms.transformed_basis import transformed_jacobi
from orthokit.transforms.transforms import PolyTransform


@pytest.fixture(autouse=True, scope="session")
def _limit_blas_threads():
    os.environ.setdefault("OMP_NUM_THREADS", "1")
    os.environ.setdefault("OPENBLAS_NUM_THREADS", "1")
    os.environ.setdefault("MKL_NUM_THREADS", "1")


@pytest.fixture(scope="session")
def threads_ok():
    """Return True if worker threads can be started in this environment."""
    try:
        with ThreadPoolExecutor(max_workers=2) as ex:
            for fut in [ex.submit(lambda: None) for _ in range(2)]:
                fut.result(timeout=1.0)
        return True
    except (RuntimeError, MemoryError, OSError, TimeoutError):
        return False


@pytest.fixture(scope="session")
def legendre_basis():
    """Normalized Legendre polynomials on [-1, 1] (no envelope)."""
    return discretize(5, pcut=0, pin=0, xcut=1.0, xin=-1.0, num_quadrature_points=1000)


@pytest.fixture(scope="session")
def jacobi_basis():
    """Eight polynomials vanishing quadratically at 1 and linearly at -1."""
    return discretize(8, pcut=2, pin=1, xcut=1.0, xin=-1.0, num_quadrature_points=500)


@pytest.fixture(scope="session")
def radial_basis():
    """A radial basis in the transform x = ((1 + r0) / (1 + r))^2."""
    return transformed_jacobi(6, PolyTransform(2, 1.0), 3.0, 0.5, pcut=2, pin=0)
