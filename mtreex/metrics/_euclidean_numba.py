from __future__ import annotations

from typing import Any

import numpy as np
from numba import njit

from .euclidean import _as_vectors

__all__ = ["numba_euclidean_distance"]


@njit(cache=True)
def _euclidean_kernel(x: np.ndarray, y: np.ndarray) -> float:
    total = 0.0
    for idx in range(x.shape[0]):
        delta = x[idx] - y[idx]
        total += delta * delta
    return np.sqrt(total)


def numba_euclidean_distance(a: Any, b: Any) -> float:
    """Numba-compiled variant of :func:`euclidean_distance`."""

    x, y = _as_vectors(a, b)
    return float(_euclidean_kernel(x, y))
