"""Reusable scratch buffers for high-frequency basis evaluation.

An :class:`ArrayPool` caches numpy arrays keyed by ``(shape, dtype)``.
Evaluators acquire their output arrays from a pool; callers that are done
with a result may hand it back with :meth:`ArrayPool.release` so the next
evaluation of the same shape does not allocate. Releasing is optional: a
buffer that is never released is simply garbage collected.

Pools hold no state that affects results. Buffers are handed out with
arbitrary contents and every evaluator overwrites the entries it reports,
so :meth:`ArrayPool.clear` only ever changes performance.

Pools are not synchronized. :func:`default_pool` therefore returns one pool
per thread; an explicit pool must not be shared between threads without a
lock.

Example:
    >>> import numpy as np
    >>> from orthokit.utils.pool import ArrayPool
    >>> pool = ArrayPool()
    >>> with pool.scoped((4,)) as buf:
    ...     buf[:] = 0.0
    >>> pool.num_free()
    1
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

import numpy as np
from numpy.typing import DTypeLike

__all__ = [
    "ArrayPool",
    "default_pool",
    "resolve_pool",
]


def _key(shape, dtype) -> tuple[tuple[int, ...], np.dtype]:
    if np.ndim(shape) == 0:
        shape = (int(shape),)
    return tuple(int(s) for s in shape), np.dtype(dtype)


class ArrayPool:
    """Cache of free numpy buffers keyed by shape and dtype.

    Each buffer is either free (held by the pool) or in use (held by a
    caller). :meth:`acquire` moves a buffer from free to in use, allocating
    one if none is free; :meth:`release` moves it back.
    """

    def __init__(self) -> None:
        """Initializes an empty pool."""
        self._free: dict[tuple[tuple[int, ...], np.dtype], list[np.ndarray]] = {}
        self._free_ids: set[int] = set()

    def acquire(self, shape, dtype: DTypeLike = np.float64) -> np.ndarray:
        """Returns a buffer of the given shape and dtype.

        Args:
            shape: Shape of the buffer; an integer means a 1D buffer.
            dtype: Numeric type of the buffer.

        Returns:
            A recycled or newly allocated array. Its contents are arbitrary.
        """
        key = _key(shape, dtype)
        stack = self._free.get(key)
        if stack:
            buf = stack.pop()
            self._free_ids.discard(id(buf))
            return buf
        return np.empty(key[0], dtype=key[1])

    def release(self, buf: np.ndarray) -> None:
        """Returns a buffer to the pool.

        Args:
            buf: An array previously obtained from :meth:`acquire`, or any
                array that owns its data.

        Raises:
            TypeError: If ``buf`` is not a numpy array.
            ValueError: If ``buf`` is already free, or is a view of another
                array.
        """
        if not isinstance(buf, np.ndarray):
            raise TypeError(f"only numpy arrays can be released; got {type(buf).__name__}.")
        if buf.base is not None:
            raise ValueError("cannot release a view; release the array that owns the data.")
        if id(buf) in self._free_ids:
            raise ValueError("buffer released twice.")
        self._free.setdefault(_key(buf.shape, buf.dtype), []).append(buf)
        self._free_ids.add(id(buf))

    @contextmanager
    def scoped(self, shape, dtype: DTypeLike = np.float64) -> Iterator[np.ndarray]:
        """Acquires a buffer for the duration of a ``with`` block.

        The buffer is released on every exit path, including exceptions.

        Args:
            shape: Shape of the buffer.
            dtype: Numeric type of the buffer.

        Yields:
            The acquired buffer.
        """
        buf = self.acquire(shape, dtype)
        try:
            yield buf
        finally:
            self.release(buf)

    def clear(self) -> None:
        """Drops all free buffers."""
        self._free.clear()
        self._free_ids.clear()

    def num_free(self) -> int:
        """Returns the number of free buffers held by the pool."""
        return sum(len(v) for v in self._free.values())


_local = threading.local()


def default_pool() -> ArrayPool:
    """Returns the pool of the calling thread, creating it on first use."""
    pool = getattr(_local, "pool", None)
    if pool is None:
        pool = ArrayPool()
        _local.pool = pool
    return pool


def resolve_pool(pool: ArrayPool | None) -> ArrayPool:
    """Returns ``pool``, or the calling thread's default pool if it is ``None``."""
    return default_pool() if pool is None else pool
