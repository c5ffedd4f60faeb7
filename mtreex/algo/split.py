"""Promotion and partition policies used when a node overflows.

A split policy is a pair of plain callables:

``promote(data_set, distance) -> (pivot1, pivot2)``
    Pick two distinct members of ``data_set`` as the pivots of the two nodes
    that replace the overflowing one.

``partition(data_set, pivot1, pivot2, distance) -> (set1, set2)``
    Assign every member to one of the pivots. Each pivot seeds its own set, the
    sets are disjoint and together cover ``data_set``.

``distance`` is the operation-scoped :class:`~mtreex.metrics.CachedDistance`,
so distances computed here are reused when the split node is rebuilt.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Set, Tuple

import numpy as np

from mtreex import config as mx_config
from mtreex.metrics import DistanceFunction

Promotion = Callable[[Set[Any], DistanceFunction], Tuple[Any, Any]]
Partitioner = Callable[[Set[Any], Any, Any, DistanceFunction], Tuple[Set[Any], Set[Any]]]


def _require_pair(data_set: Set[Any]) -> None:
    if len(data_set) < 2:
        raise ValueError("Promotion requires at least two distinct objects.")


class RandomPromotion:
    """Promote two members chosen uniformly at random."""

    def __init__(self, seed: int | None = None) -> None:
        if seed is None:
            seed = mx_config.runtime_config().seed
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def __call__(self, data_set: Set[Any], distance: DistanceFunction) -> Tuple[Any, Any]:
        _require_pair(data_set)
        members = list(data_set)
        first, second = self._rng.choice(len(members), size=2, replace=False)
        return members[int(first)], members[int(second)]

    def __repr__(self) -> str:
        return f"RandomPromotion(seed={self.seed!r})"


def sorted_promotion(data_set: Set[Any], distance: DistanceFunction) -> Tuple[Any, Any]:
    """Promote the smallest and largest members under their natural ordering."""

    _require_pair(data_set)
    ordered = sorted(data_set)
    return ordered[0], ordered[-1]


def max_spread_promotion(data_set: Set[Any], distance: DistanceFunction) -> Tuple[Any, Any]:
    """Promote the pair of members that are farthest apart."""

    _require_pair(data_set)
    members = list(data_set)
    best: Tuple[Any, Any] = (members[0], members[1])
    best_distance = -1.0
    for idx, first in enumerate(members):
        for second in members[idx + 1 :]:
            value = distance(first, second)
            if value > best_distance:
                best = (first, second)
                best_distance = value
    return best


def hyperplane_partition(
    data_set: Set[Any], pivot1: Any, pivot2: Any, distance: DistanceFunction
) -> Tuple[Set[Any], Set[Any]]:
    """Assign each member to its closer pivot; ties go to the first set."""

    first = {pivot1}
    second = {pivot2}
    for data in data_set:
        if data == pivot1 or data == pivot2:
            continue
        if distance(data, pivot1) <= distance(data, pivot2):
            first.add(data)
        else:
            second.add(data)
    return first, second


def balanced_partition(
    data_set: Set[Any], pivot1: Any, pivot2: Any, distance: DistanceFunction
) -> Tuple[Set[Any], Set[Any]]:
    """Closer-pivot assignment, rebalanced until sizes differ by at most one.

    Members are moved from the larger set starting with the one farthest from
    that set's pivot.
    """

    first, second = hyperplane_partition(data_set, pivot1, pivot2, distance)
    while abs(len(first) - len(second)) > 1:
        if len(first) > len(second):
            larger, smaller, pivot = first, second, pivot1
        else:
            larger, smaller, pivot = second, first, pivot2
        farthest = max(
            (data for data in larger if data != pivot),
            key=lambda data: distance(data, pivot),
        )
        larger.remove(farthest)
        smaller.add(farthest)
    return first, second


PROMOTIONS: Dict[str, Callable[[int | None], Promotion]] = {
    "random": RandomPromotion,
    "sorted": lambda seed: sorted_promotion,
    "max-spread": lambda seed: max_spread_promotion,
}

PARTITIONS: Dict[str, Partitioner] = {
    "balanced": balanced_partition,
    "hyperplane": hyperplane_partition,
}


@dataclass(frozen=True)
class SplitPolicy:
    promote: Promotion
    partition: Partitioner

    def __post_init__(self) -> None:
        if not callable(self.promote):
            raise ValueError("SplitPolicy.promote must be callable.")
        if not callable(self.partition):
            raise ValueError("SplitPolicy.partition must be callable.")

    @classmethod
    def default(cls, seed: int | None = None) -> "SplitPolicy":
        return cls(RandomPromotion(seed), balanced_partition)

    @classmethod
    def from_names(
        cls,
        promotion: str = "random",
        partition: str = "balanced",
        *,
        seed: int | None = None,
    ) -> "SplitPolicy":
        try:
            promote = PROMOTIONS[promotion](seed)
        except KeyError:
            raise ValueError(
                f"Unknown promotion '{promotion}'. Expected one of {sorted(PROMOTIONS)}."
            ) from None
        try:
            partitioner = PARTITIONS[partition]
        except KeyError:
            raise ValueError(
                f"Unknown partition '{partition}'. Expected one of {sorted(PARTITIONS)}."
            ) from None
        return cls(promote, partitioner)

    def split(
        self, data_set: Set[Any], distance: DistanceFunction
    ) -> Tuple[Tuple[Any, Set[Any]], Tuple[Any, Set[Any]]]:
        pivot1, pivot2 = self.promote(data_set, distance)
        if pivot1 == pivot2 or pivot1 not in data_set or pivot2 not in data_set:
            raise ValueError(
                f"Promotion must return two distinct members, received {pivot1!r} and {pivot2!r}."
            )
        first, second = self.partition(data_set, pivot1, pivot2, distance)
        if pivot1 not in first or pivot2 not in second:
            raise ValueError("Partition must place each pivot in its own set.")
        if first & second or (first | second) != data_set:
            raise ValueError("Partition must be disjoint and cover the data set.")
        return (pivot1, first), (pivot2, second)


__all__ = [
    "PARTITIONS",
    "PROMOTIONS",
    "Partitioner",
    "Promotion",
    "RandomPromotion",
    "SplitPolicy",
    "balanced_partition",
    "hyperplane_partition",
    "max_spread_promotion",
    "sorted_promotion",
]
