from __future__ import annotations

import math
from typing import Any, Callable, Dict, Hashable, Tuple

DistanceFunction = Callable[[Any, Any], float]


class CachedDistance:
    """Memoizing wrapper around a metric, scoped to a single tree operation.

    Values are keyed on the unordered pair of (hashable) data objects, so
    ``cache(a, b)`` and ``cache(b, a)`` share one evaluation of the base metric.
    The tree builds a fresh instance for every insert, remove and query
    execution; persistent distances live in the entries themselves.
    """

    def __init__(self, distance_function: DistanceFunction) -> None:
        if not callable(distance_function):
            raise ValueError("distance_function must be callable.")
        self._distance_function = distance_function
        self._values: Dict[Tuple[Hashable, Hashable], float] = {}
        self.hits = 0
        self.misses = 0

    @property
    def distance_function(self) -> DistanceFunction:
        return self._distance_function

    def __call__(self, a: Any, b: Any) -> float:
        value = self._values.get((a, b))
        if value is None:
            value = self._values.get((b, a))
        if value is not None:
            self.hits += 1
            return value

        value = float(self._distance_function(a, b))
        if math.isnan(value) or value < 0.0:
            raise ValueError(f"Metric returned invalid distance {value!r} for {a!r} and {b!r}.")
        self._values[(a, b)] = value
        self.misses += 1
        return value

    def __len__(self) -> int:
        return len(self._values)

    def clear(self) -> None:
        self._values.clear()
        self.hits = 0
        self.misses = 0
