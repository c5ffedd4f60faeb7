from __future__ import annotations

import time
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np
from numpy.random import Generator, default_rng

from mtreex import MTree, SplitPolicy


@dataclass(frozen=True)
class QueryBenchmarkResult:
    elapsed_seconds: float
    queries: int
    k: int
    latency_ms: float
    queries_per_second: float
    build_seconds: float | None = None
    distance_computations: int = 0
    linear_scan_computations: int = 0

    @property
    def pruning_ratio(self) -> float:
        """Fraction of the distances a linear scan would evaluate that were skipped."""

        if self.linear_scan_computations == 0:
            return 0.0
        return 1.0 - self.distance_computations / self.linear_scan_computations


def gaussian_points(rng: Generator, count: int, dimension: int) -> List[Tuple[float, ...]]:
    samples = rng.standard_normal(size=(count, dimension)).astype(np.float64)
    return [tuple(float(value) for value in row) for row in samples]


def build_tree(
    *,
    dimension: int,
    tree_points: int,
    capacity: int,
    seed: int,
    promotion: str = "random",
    partition: str = "balanced",
) -> Tuple[MTree, List[Tuple[float, ...]], float]:
    rng = default_rng(seed)
    points = gaussian_points(rng, tree_points, dimension)
    tree = MTree(
        max_node_capacity=capacity,
        split_policy=SplitPolicy.from_names(promotion, partition, seed=seed),
    )
    start = time.perf_counter()
    for point in points:
        tree.add(point)
    build_seconds = time.perf_counter() - start
    return tree, points, build_seconds


def benchmark_knn_latency(
    *,
    dimension: int,
    tree_points: int,
    query_count: int,
    k: int,
    capacity: int,
    seed: int,
    radius: float | None = None,
    promotion: str = "random",
    partition: str = "balanced",
) -> Tuple[MTree, QueryBenchmarkResult]:
    tree, _, build_seconds = build_tree(
        dimension=dimension,
        tree_points=tree_points,
        capacity=capacity,
        seed=seed,
        promotion=promotion,
        partition=partition,
    )
    queries = gaussian_points(default_rng(seed + 1), query_count, dimension)

    before = tree.stats.distance_computations
    start = time.perf_counter()
    for query in queries:
        if radius is None:
            list(tree.limit_query(query, k))
        else:
            list(tree.range_query(query, radius))
    elapsed = time.perf_counter() - start
    computations = tree.stats.distance_computations - before

    qps = query_count / elapsed if elapsed > 0 else float("inf")
    latency = (elapsed / query_count) * 1e3 if query_count else 0.0
    return tree, QueryBenchmarkResult(
        elapsed_seconds=elapsed,
        queries=query_count,
        k=k,
        latency_ms=latency,
        queries_per_second=qps,
        build_seconds=build_seconds,
        distance_computations=computations,
        linear_scan_computations=query_count * len(tree),
    )


__all__ = [
    "QueryBenchmarkResult",
    "benchmark_knn_latency",
    "build_tree",
    "gaussian_points",
]
