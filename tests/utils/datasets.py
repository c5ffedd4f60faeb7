from __future__ import annotations

from typing import List, Tuple

import numpy as np
from numpy.random import Generator


def gaussian_points(rng: Generator, count: int, dimension: int) -> List[Tuple[float, ...]]:
    samples = rng.standard_normal(size=(count, dimension)).astype(np.float64)
    return [tuple(float(value) for value in row) for row in samples]


def integer_points(
    rng: Generator, count: int, dimension: int, *, span: int = 100
) -> List[Tuple[int, ...]]:
    """`count` distinct integer vectors with coordinates in ``[0, span)``."""

    seen: set[Tuple[int, ...]] = set()
    points: List[Tuple[int, ...]] = []
    while len(points) < count:
        point = tuple(int(value) for value in rng.integers(0, span, size=dimension))
        if point not in seen:
            seen.add(point)
            points.append(point)
    return points


def levenshtein(a: str, b: str) -> float:
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (char_a != char_b),
                )
            )
        previous = current
    return float(previous[-1])
