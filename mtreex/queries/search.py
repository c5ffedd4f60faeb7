from __future__ import annotations

import heapq
import itertools
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterator, List, Optional, Tuple

from mtreex.core.nodes import RADIUS_TOLERANCE, Node
from mtreex.logging import get_logger
from mtreex.metrics import CachedDistance

if TYPE_CHECKING:  # pragma: no cover
    from mtreex.core.tree import MTree

LOGGER = get_logger("queries.search")


def _loosen(bound: float) -> float:
    """Lower bound shifted down by the rounding slack of accumulated radii."""

    return bound - RADIUS_TOLERANCE * (1.0 + abs(bound))


@dataclass(frozen=True)
class ResultItem:
    """A stored object together with its distance to the query object."""

    data: Any
    distance: float


def search(
    root: Optional[Node],
    query: Any,
    distance: CachedDistance,
    *,
    radius: float = math.inf,
    limit: Optional[int] = None,
) -> Iterator[ResultItem]:
    """Yield stored objects within `radius` of `query`, nearest first.

    Subtrees are expanded best-first by the lower bound
    ``max(0, d(query, pivot) - covering_radius)``. A found object is yielded as
    soon as no pending subtree can still hold anything closer, so results are
    produced lazily in ascending ``(distance, insertion order)``. With `limit`
    the search keeps the `limit` best candidates seen so far and prunes against
    the worst of them.
    """

    if root is None or limit == 0:
        return

    counter = itertools.count()
    # (lower bound, tie-break, node, distance from query to the node's pivot)
    pending: List[Tuple[float, int, Node, Optional[float]]] = [(0.0, next(counter), root, None)]
    found: List[Tuple[float, int, Any]] = []
    # Max-heap of the best (distance, ordinal) keys seen, stored negated.
    best: List[Tuple[float, int]] = []
    emitted = 0

    def threshold() -> float:
        if limit is not None and len(best) >= limit:
            return min(radius, -best[0][0])
        return radius

    while pending or found:
        bound = pending[0][0] if pending else math.inf
        while found and (found[0][0] < bound or not pending):
            value, _, data = heapq.heappop(found)
            yield ResultItem(data, value)
            emitted += 1
            if limit is not None and emitted >= limit:
                return
        if not pending:
            break

        lower, _, node, parent_distance = heapq.heappop(pending)
        if lower > threshold():
            continue

        for entry in node.entries:
            cutoff = threshold()
            if parent_distance is not None and entry.distance_to_parent is not None:
                gap = abs(parent_distance - entry.distance_to_parent) - entry.covering_radius
                if _loosen(gap) > cutoff:
                    continue
            value = distance(query, entry.key)
            if not node.is_leaf:
                lower_bound = max(_loosen(value - entry.covering_radius), 0.0)
                if lower_bound <= cutoff:
                    heapq.heappush(pending, (lower_bound, next(counter), entry.subtree, value))
                continue

            if value > cutoff:
                continue
            if limit is not None:
                key = (-value, -entry.ordinal)
                if len(best) < limit:
                    heapq.heappush(best, key)
                elif key > best[0]:
                    heapq.heapreplace(best, key)
                else:
                    continue
            heapq.heappush(found, (value, entry.ordinal, entry.data))


class Query:
    """Re-iterable handle over a range or limit query.

    Each iteration runs an independent search over the tree as it is when the
    iteration starts. Stop consuming to abandon the search.
    """

    def __init__(
        self,
        tree: "MTree",
        query: Any,
        *,
        radius: float = math.inf,
        limit: Optional[int] = None,
    ) -> None:
        self._tree = tree
        self.query = query
        self.radius = radius
        self.limit = limit

    def __iter__(self) -> Iterator[ResultItem]:
        distance = CachedDistance(self._tree.distance_function)
        try:
            yield from search(
                self._tree.root,
                self.query,
                distance,
                radius=self.radius,
                limit=self.limit,
            )
        finally:
            self._tree.stats.distance_computations += distance.misses
            LOGGER.debug(
                "Query %r (radius=%s, limit=%s) evaluated %d distances",
                self.query,
                self.radius,
                self.limit,
                distance.misses,
            )

    def __repr__(self) -> str:
        return f"Query(query={self.query!r}, radius={self.radius!r}, limit={self.limit!r})"
