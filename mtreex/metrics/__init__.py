"""Metric registry and the operation-scoped distance cache."""

from __future__ import annotations

from typing import Dict, Tuple

from mtreex import config as mx_config

from .cached import CachedDistance, DistanceFunction
from .euclidean import euclidean_distance

_REGISTRY: Dict[str, DistanceFunction] = {"euclidean": euclidean_distance}


def register_metric(name: str, distance_function: DistanceFunction, *, overwrite: bool = False) -> None:
    """Register ``distance_function`` under ``name`` for :func:`get_metric`."""

    key = name.strip().lower()
    if not callable(distance_function):
        raise ValueError(f"Metric '{name}' must be callable.")
    if key in _REGISTRY and not overwrite:
        raise ValueError(f"Metric '{key}' is already registered.")
    _REGISTRY[key] = distance_function


def available_metrics() -> Tuple[str, ...]:
    return tuple(sorted(_REGISTRY))


def get_metric(name: str | None = None) -> DistanceFunction:
    """Resolve a metric by name, defaulting to ``RuntimeConfig.metric``."""

    runtime = mx_config.runtime_config()
    key = (name or runtime.metric).strip().lower()
    if key not in _REGISTRY:
        raise ValueError(f"Unknown metric '{key}'. Expected one of {available_metrics()}.")
    if key == "euclidean" and runtime.enable_numba:
        from ._euclidean_numba import numba_euclidean_distance

        return numba_euclidean_distance
    return _REGISTRY[key]


__all__ = [
    "CachedDistance",
    "DistanceFunction",
    "available_metrics",
    "euclidean_distance",
    "get_metric",
    "register_metric",
]
