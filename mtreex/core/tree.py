from __future__ import annotations

import itertools
import math
import numbers
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterator, Optional

from mtreex import config as mx_config
from mtreex.algo.insert import insert
from mtreex.algo.remove import remove
from mtreex.algo.split import SplitPolicy
from mtreex.core.nodes import Node, contains_data
from mtreex.core.validate import validate_tree
from mtreex.logging import get_logger
from mtreex.metrics import CachedDistance, DistanceFunction, get_metric
from mtreex.queries.search import Query

LOGGER = get_logger("core.tree")

DEFAULT_MAX_NODE_CAPACITY = 16


@dataclass
class TreeStats:
    insertions: int = 0
    duplicates: int = 0
    removals: int = 0
    missed_removals: int = 0
    splits: int = 0
    borrows: int = 0
    merges: int = 0
    distance_computations: int = 0

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


def _resolve_min_capacity(max_node_capacity: int, min_node_capacity: Optional[int]) -> int:
    if min_node_capacity is None or min_node_capacity < 0:
        return max_node_capacity // 2
    return int(min_node_capacity)


class MTree:
    """Height-balanced metric tree over hashable data objects.

    Parameters
    ----------
    max_node_capacity:
        Maximum number of entries per node (at least 2).
    min_node_capacity:
        Minimum number of entries per non-root node. ``-1`` or ``None`` selects
        ``max_node_capacity // 2``; explicit values must lie in
        ``[1, max_node_capacity // 2]`` so that merges never overflow.
    distance_function:
        Metric ``(a, b) -> float``. Defaults to ``get_metric()``.
    split_policy:
        Promotion/partition pair used on overflow. Defaults to
        ``SplitPolicy.default()``.
    check_invariants:
        Run :func:`validate_tree` after every mutation. Defaults to
        ``RuntimeConfig.check_invariants``.
    """

    def __init__(
        self,
        max_node_capacity: int = DEFAULT_MAX_NODE_CAPACITY,
        min_node_capacity: Optional[int] = -1,
        distance_function: Optional[DistanceFunction] = None,
        split_policy: Optional[SplitPolicy] = None,
        *,
        check_invariants: Optional[bool] = None,
    ) -> None:
        if max_node_capacity < 2:
            raise ValueError(f"max_node_capacity must be at least 2, received {max_node_capacity}.")
        min_capacity = _resolve_min_capacity(max_node_capacity, min_node_capacity)
        if not 1 <= min_capacity <= max_node_capacity // 2:
            raise ValueError(
                f"min_node_capacity must lie in [1, {max_node_capacity // 2}], received {min_capacity}."
            )
        if distance_function is None:
            distance_function = get_metric()
        if not callable(distance_function):
            raise ValueError("distance_function must be callable.")
        if split_policy is None:
            split_policy = SplitPolicy.default()
        if not isinstance(split_policy, SplitPolicy):
            raise ValueError("split_policy must be a SplitPolicy.")
        if check_invariants is None:
            check_invariants = mx_config.runtime_config().check_invariants

        self.max_node_capacity = int(max_node_capacity)
        self.min_node_capacity = min_capacity
        self.distance_function = distance_function
        self.split_policy = split_policy
        self.check_invariants = bool(check_invariants)
        self.root: Optional[Node] = None
        self.stats = TreeStats()
        self._size = 0
        self._ordinals = itertools.count()

    def next_ordinal(self) -> int:
        return next(self._ordinals)

    def add(self, data: Any) -> None:
        """Store `data`; exact duplicates are ignored."""

        distance = CachedDistance(self.distance_function)
        try:
            if insert(self, data, distance):
                self._size += 1
                self.stats.insertions += 1
            else:
                self.stats.duplicates += 1
        finally:
            self.stats.distance_computations += distance.misses
        if self.check_invariants:
            validate_tree(self)

    def remove(self, data: Any) -> bool:
        """Remove `data`; returns whether it was stored."""

        distance = CachedDistance(self.distance_function)
        try:
            removed = remove(self, data, distance)
        finally:
            self.stats.distance_computations += distance.misses
        if removed:
            self._size -= 1
            self.stats.removals += 1
        else:
            self.stats.missed_removals += 1
        if self.check_invariants:
            validate_tree(self)
        return removed

    def range_query(self, query: Any, radius: float) -> Query:
        """Objects within `radius` of `query`, nearest first."""

        radius = float(radius)
        if math.isnan(radius) or radius < 0:
            raise ValueError(f"radius must be a non-negative number, received {radius}.")
        return Query(self, query, radius=radius)

    def limit_query(self, query: Any, limit: int) -> Query:
        """The `limit` objects nearest to `query`, nearest first."""

        if not isinstance(limit, numbers.Integral) or limit < 0:
            raise ValueError(f"limit must be a non-negative integer, received {limit!r}.")
        return Query(self, query, limit=int(limit))

    def distance(self, a: Any, b: Any) -> float:
        return float(self.distance_function(a, b))

    @property
    def height(self) -> int:
        return 0 if self.root is None else self.root.height()

    def __len__(self) -> int:
        return self._size

    def __contains__(self, data: Any) -> bool:
        distance = CachedDistance(self.distance_function)
        return contains_data(self.root, data, distance)

    def __iter__(self) -> Iterator[Any]:
        if self.root is None:
            return iter(())
        return self.root.iter_data()

    def __repr__(self) -> str:
        return (
            f"MTree(size={self._size}, height={self.height}, "
            f"capacity=[{self.min_node_capacity}, {self.max_node_capacity}])"
        )
