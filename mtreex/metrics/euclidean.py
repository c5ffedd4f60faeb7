from __future__ import annotations

from typing import Any, Tuple

import numpy as np

__all__ = ["euclidean_distance"]


def _as_vectors(a: Any, b: Any) -> Tuple[np.ndarray, np.ndarray]:
    x = np.ascontiguousarray(a, dtype=np.float64)
    y = np.ascontiguousarray(b, dtype=np.float64)
    if x.ndim != 1 or y.ndim != 1:
        raise ValueError("Euclidean distance expects 1-D numeric sequences.")
    if x.shape != y.shape:
        raise ValueError(
            f"Euclidean distance expects equal dimensionality, received {x.shape[0]} and {y.shape[0]}."
        )
    return x, y


def euclidean_distance(a: Any, b: Any) -> float:
    """Euclidean distance between two equal-length numeric sequences."""

    x, y = _as_vectors(a, b)
    diff = x - y
    return float(np.sqrt(np.dot(diff, diff)))
