"""Scenario fixtures: scripted add/remove sequences cross-checked by linear scan.

A scenario is a list of actions. Each action adds (``"A"``) or removes
(``"R"``) one integer vector and carries a query vector, radius and limit that
are evaluated against the tree after the mutation. :func:`replay_scenario`
compares every query answer with a brute-force scan of the objects that should
be stored.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence, Tuple

import numpy as np

from mtreex.core.tree import MTree
from mtreex.logging import get_logger
from mtreex.metrics import DistanceFunction
from mtreex.queries import ResultItem

LOGGER = get_logger("scenario")

_COMMANDS = {"A", "R"}


class ReplayMismatch(AssertionError):
    """Raised when the tree disagrees with the reference linear scan."""


@dataclass(frozen=True)
class Action:
    cmd: str
    data: Tuple[int, ...]
    query: Tuple[int, ...]
    radius: float
    limit: int


@dataclass(frozen=True)
class Scenario:
    dimensions: int
    actions: Tuple[Action, ...]

    def __len__(self) -> int:
        return len(self.actions)


@dataclass(frozen=True)
class ReplayReport:
    actions: int
    additions: int
    removals: int
    range_results: int
    limit_results: int
    final_size: int
    distance_computations: int


def _random_vector(rng: np.random.Generator, dimensions: int, span: int) -> Tuple[int, ...]:
    return tuple(int(value) for value in rng.integers(0, span, size=dimensions))


def generate_scenario(
    dimensions: int = 2,
    count: int = 100,
    *,
    seed: int | None = None,
    remove_probability: float = 0.2,
    span: int = 100,
) -> Scenario:
    """Random scenario of `count` actions over integer vectors in ``[0, span)``."""

    if dimensions < 1:
        raise ValueError("dimensions must be positive.")
    if not 0.0 <= remove_probability < 1.0:
        raise ValueError("remove_probability must lie in [0, 1).")
    if count > span**dimensions:
        raise ValueError(f"Cannot draw {count} distinct vectors from {span}^{dimensions} candidates.")

    rng = np.random.default_rng(seed)
    present: List[Tuple[int, ...]] = []
    ever_added: set[Tuple[int, ...]] = set()
    actions: List[Action] = []
    while len(actions) < count:
        if present and rng.random() < remove_probability:
            data = present.pop(int(rng.integers(len(present))))
            cmd = "R"
        else:
            data = _random_vector(rng, dimensions, span)
            if data in ever_added:
                continue
            ever_added.add(data)
            present.append(data)
            cmd = "A"
        actions.append(
            Action(
                cmd=cmd,
                data=data,
                query=_random_vector(rng, dimensions, span),
                radius=float(rng.uniform(0.0, span / 2.0)),
                limit=int(rng.integers(0, max(len(present), 1) + 3)),
            )
        )
    return Scenario(dimensions=dimensions, actions=tuple(actions))


def _action_to_dict(action: Action) -> Dict[str, Any]:
    return {
        "cmd": action.cmd,
        "data": list(action.data),
        "query": list(action.query),
        "radius": action.radius,
        "limit": action.limit,
    }


def _action_from_dict(raw: Dict[str, Any], dimensions: int, index: int) -> Action:
    try:
        action = Action(
            cmd=str(raw["cmd"]),
            data=tuple(int(value) for value in raw["data"]),
            query=tuple(int(value) for value in raw["query"]),
            radius=float(raw["radius"]),
            limit=int(raw["limit"]),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Malformed action #{index}: {exc}") from exc
    if action.cmd not in _COMMANDS:
        raise ValueError(f"Action #{index} has unknown command '{action.cmd}'.")
    if len(action.data) != dimensions or len(action.query) != dimensions:
        raise ValueError(f"Action #{index} does not match dimensionality {dimensions}.")
    if action.radius < 0 or action.limit < 0:
        raise ValueError(f"Action #{index} has a negative radius or limit.")
    return action


def save_scenario(scenario: Scenario, path: str | Path) -> Path:
    target = Path(path)
    payload = {
        "dimensions": scenario.dimensions,
        "actions": [_action_to_dict(action) for action in scenario.actions],
    }
    target.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return target


def load_scenario(path: str | Path) -> Scenario:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    try:
        dimensions = int(payload["dimensions"])
        raw_actions = payload["actions"]
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Malformed scenario file {path}: {exc}") from exc
    actions = tuple(
        _action_from_dict(raw, dimensions, index) for index, raw in enumerate(raw_actions)
    )
    return Scenario(dimensions=dimensions, actions=actions)


def linear_range(
    objects: Iterable[Any], query: Any, radius: float, distance: DistanceFunction
) -> List[ResultItem]:
    """Reference range query by exhaustive scan."""

    items = [ResultItem(data, float(distance(data, query))) for data in objects]
    return sorted((item for item in items if item.distance <= radius), key=lambda item: item.distance)


def linear_limit(
    objects: Iterable[Any], query: Any, limit: int, distance: DistanceFunction
) -> List[ResultItem]:
    """Reference limit query by exhaustive scan; ties keep the iteration order."""

    items = [ResultItem(data, float(distance(data, query))) for data in objects]
    return sorted(items, key=lambda item: item.distance)[:limit]


def check_range_query(
    tree: MTree, objects: Sequence[Any], query: Any, radius: float
) -> List[ResultItem]:
    """Run a range query and verify it against a linear scan of `objects`."""

    results = list(tree.range_query(query, radius))
    returned = [item.data for item in results]
    if len(set(returned)) != len(returned):
        raise ReplayMismatch(f"Range query around {query!r} returned duplicates.")
    _check_sorted(results, query)
    for item in results:
        _check_distance(tree, item, query)
        if item.distance > radius:
            raise ReplayMismatch(f"{item.data!r} at {item.distance} exceeds radius {radius}.")

    expected = {item.data for item in linear_range(objects, query, radius, tree.distance)}
    if set(returned) != expected:
        raise ReplayMismatch(
            f"Range query around {query!r} with radius {radius}: missing "
            f"{list(expected - set(returned))}, unexpected {list(set(returned) - expected)}."
        )
    return results


def check_limit_query(
    tree: MTree, objects: Sequence[Any], query: Any, limit: int
) -> List[ResultItem]:
    """Run a limit query and verify it against a linear scan of `objects`.

    Objects exactly at the farthest returned distance may or may not be part of
    the answer; everything strictly closer must be, everything farther must not.
    """

    results = list(tree.limit_query(query, limit))
    if len(results) != min(limit, len(objects)):
        raise ReplayMismatch(
            f"Limit query around {query!r} returned {len(results)} items, "
            f"expected {min(limit, len(objects))}."
        )
    returned = [item.data for item in results]
    if len(set(returned)) != len(returned):
        raise ReplayMismatch(f"Limit query around {query!r} returned duplicates.")
    _check_sorted(results, query)

    stored = set(objects)
    farthest = 0.0
    for item in results:
        if item.data not in stored:
            raise ReplayMismatch(f"Limit query returned unknown object {item.data!r}.")
        _check_distance(tree, item, query)
        farthest = max(farthest, item.distance)

    for data in objects:
        value = tree.distance(data, query)
        if value < farthest and data not in returned:
            raise ReplayMismatch(f"Limit query around {query!r} missed {data!r} at {value}.")
        if value > farthest and data in returned:
            raise ReplayMismatch(f"Limit query around {query!r} included {data!r} at {value}.")
    return results


def _check_sorted(results: Sequence[ResultItem], query: Any) -> None:
    previous = 0.0
    for item in results:
        if item.distance < previous:
            raise ReplayMismatch(f"Results around {query!r} are not sorted by distance.")
        previous = item.distance


def _check_distance(tree: MTree, item: ResultItem, query: Any) -> None:
    expected = tree.distance(item.data, query)
    if item.distance != expected:
        raise ReplayMismatch(
            f"Reported distance {item.distance} for {item.data!r} differs from {expected}."
        )


def replay_scenario(tree: MTree, scenario: Scenario) -> ReplayReport:
    """Apply every action to `tree`, checking both queries after each one."""

    stored: Dict[Tuple[int, ...], None] = {}
    additions = removals = range_results = limit_results = 0
    start_computations = tree.stats.distance_computations

    for index, action in enumerate(scenario.actions):
        if action.cmd == "A":
            stored[action.data] = None
            tree.add(action.data)
            additions += 1
        else:
            expected = action.data in stored
            stored.pop(action.data, None)
            removed = tree.remove(action.data)
            if removed != expected:
                raise ReplayMismatch(
                    f"Action #{index}: removing {action.data!r} returned {removed}, expected {expected}."
                )
            removals += 1

        objects = list(stored)
        try:
            range_results += len(check_range_query(tree, objects, action.query, action.radius))
            limit_results += len(check_limit_query(tree, objects, action.query, action.limit))
        except ReplayMismatch as exc:
            raise ReplayMismatch(f"Action #{index} ({action.cmd} {action.data!r}): {exc}") from exc

    report = ReplayReport(
        actions=len(scenario.actions),
        additions=additions,
        removals=removals,
        range_results=range_results,
        limit_results=limit_results,
        final_size=len(tree),
        distance_computations=tree.stats.distance_computations - start_computations,
    )
    LOGGER.debug("Replayed scenario: %s", report)
    return report


__all__ = [
    "Action",
    "ReplayMismatch",
    "ReplayReport",
    "Scenario",
    "check_limit_query",
    "check_range_query",
    "generate_scenario",
    "linear_limit",
    "linear_range",
    "load_scenario",
    "replay_scenario",
    "save_scenario",
]
