import math

import numpy as np
import pytest

from mtreex import config as mx_config
from mtreex.metrics import (
    CachedDistance,
    available_metrics,
    euclidean_distance,
    get_metric,
    register_metric,
)
from mtreex.metrics import _REGISTRY

from tests.utils import levenshtein


def test_euclidean_distance_matches_numpy():
    a = (1, 2, 3)
    b = (4, 6, 3)
    assert euclidean_distance(a, b) == pytest.approx(5.0)
    assert euclidean_distance(a, a) == 0.0
    assert euclidean_distance(a, b) == euclidean_distance(b, a)
    assert euclidean_distance(a, b) == pytest.approx(float(np.linalg.norm(np.subtract(a, b))))


def test_euclidean_distance_rejects_mismatched_dimensions():
    with pytest.raises(ValueError):
        euclidean_distance((1, 2), (1, 2, 3))
    with pytest.raises(ValueError):
        euclidean_distance([[1, 2]], [[1, 2]])


def test_cached_distance_is_symmetric_and_memoised():
    calls = []

    def metric(a, b):
        calls.append((a, b))
        return euclidean_distance(a, b)

    cache = CachedDistance(metric)
    first = cache((0, 0), (3, 4))
    second = cache((3, 4), (0, 0))
    third = cache((0, 0), (3, 4))

    assert first == second == third == 5.0
    assert calls == [((0, 0), (3, 4))]
    assert cache.misses == 1
    assert cache.hits == 2
    assert len(cache) == 1

    cache.clear()
    assert len(cache) == 0
    cache((3, 4), (0, 0))
    assert len(calls) == 2


@pytest.mark.parametrize("bad_value", [-1.0, math.nan])
def test_cached_distance_rejects_invalid_metric_output(bad_value):
    cache = CachedDistance(lambda a, b: bad_value)
    with pytest.raises(ValueError):
        cache("a", "b")


def test_cached_distance_requires_callable():
    with pytest.raises(ValueError):
        CachedDistance("euclidean")


def test_registry_resolves_builtin_and_custom_metrics(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setitem(_REGISTRY, "levenshtein", levenshtein)

    assert "euclidean" in available_metrics()
    assert "levenshtein" in available_metrics()
    assert get_metric("euclidean") is euclidean_distance
    assert get_metric("Levenshtein") is levenshtein

    with pytest.raises(ValueError):
        register_metric("levenshtein", levenshtein)
    register_metric("levenshtein", levenshtein, overwrite=True)


def test_registry_rejects_unknown_metric():
    with pytest.raises(ValueError):
        get_metric("cosine-ish")


def test_default_metric_follows_runtime_config(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setitem(_REGISTRY, "levenshtein", levenshtein)
    monkeypatch.setenv("MTREEX_METRIC", "levenshtein")
    mx_config.reset_runtime_config_cache()

    assert get_metric() is levenshtein


def test_numba_kernel_matches_numpy(monkeypatch: pytest.MonkeyPatch):
    pytest.importorskip("numba")
    monkeypatch.setenv("MTREEX_ENABLE_NUMBA", "1")
    mx_config.reset_runtime_config_cache()

    metric = get_metric("euclidean")
    assert metric is not euclidean_distance

    rng = np.random.default_rng(0)
    for _ in range(10):
        a = tuple(rng.standard_normal(5).tolist())
        b = tuple(rng.standard_normal(5).tolist())
        assert metric(a, b) == pytest.approx(euclidean_distance(a, b))
    with pytest.raises(ValueError):
        metric((1.0, 2.0), (1.0,))
