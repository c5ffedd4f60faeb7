from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Set, Tuple

from mtreex.core.nodes import Entry, LeafEntry, Node, RoutingEntry, contains_data
from mtreex.logging import get_logger
from mtreex.metrics import CachedDistance

if TYPE_CHECKING:  # pragma: no cover
    from mtreex.core.tree import MTree

LOGGER = get_logger("algo.insert")

SplitResult = Tuple[RoutingEntry, RoutingEntry]


def insert(tree: "MTree", data: Any, distance: CachedDistance) -> bool:
    """Insert `data` into `tree`; returns False when it is already stored."""

    if tree.root is None:
        tree.root = Node(is_leaf=True, entries=[LeafEntry(data, None, tree.next_ordinal())])
        return True

    if contains_data(tree.root, data, distance):
        LOGGER.debug("Ignoring duplicate object %r", data)
        return False

    replacement = _insert_into(tree, tree.root, None, data, tree.next_ordinal(), distance)
    if replacement is not None:
        tree.root = Node(is_leaf=False, entries=list(replacement))
        LOGGER.debug("Root split; height is now %d", tree.root.height())
    return True


def _choose_subtree(node: Node, data: Any, distance: CachedDistance) -> RoutingEntry:
    nearest: Optional[RoutingEntry] = None
    nearest_distance = math.inf
    cheapest: Optional[RoutingEntry] = None
    cheapest_distance = math.inf
    cheapest_growth = math.inf

    for entry in node.entries:
        value = distance(data, entry.pivot)
        if value <= entry.covering_radius:
            if value < nearest_distance:
                nearest, nearest_distance = entry, value
        else:
            growth = value - entry.covering_radius
            if growth < cheapest_growth:
                cheapest, cheapest_distance, cheapest_growth = entry, value, growth

    if nearest is not None:
        return nearest
    assert cheapest is not None
    cheapest.covering_radius = cheapest_distance
    return cheapest


def _insert_into(
    tree: "MTree",
    node: Node,
    pivot: Any,
    data: Any,
    ordinal: int,
    distance: CachedDistance,
) -> Optional[SplitResult]:
    """Insert below `node`, whose governing pivot is `pivot` (None at the root).

    Returns the two routing entries that must replace `node` in its parent when
    the node overflowed, otherwise None.
    """

    if node.is_leaf:
        parent_distance = None if pivot is None else distance(data, pivot)
        node.entries.append(LeafEntry(data, parent_distance, ordinal))
    else:
        entry = _choose_subtree(node, data, distance)
        replacement = _insert_into(tree, entry.subtree, entry.pivot, data, ordinal, distance)
        if replacement is not None:
            position = next(idx for idx, candidate in enumerate(node.entries) if candidate is entry)
            node.entries[position : position + 1] = list(replacement)
            for new_entry in replacement:
                new_entry.distance_to_parent = (
                    None if pivot is None else distance(new_entry.pivot, pivot)
                )

    if len(node.entries) > tree.max_node_capacity:
        return split_node(tree, node, distance)
    return None


def _group_members(node: Node) -> Dict[Any, List[Entry]]:
    groups: Dict[Any, List[Entry]] = {}
    for entry in node.entries:
        groups.setdefault(entry.key, []).append(entry)
    return groups


def _size(keys: Set[Any], groups: Dict[Any, List[Entry]]) -> int:
    return sum(len(groups[key]) for key in keys)


def _top_up(
    starved: Set[Any],
    starved_pivot: Any,
    donor: Set[Any],
    donor_pivot: Any,
    groups: Dict[Any, List[Entry]],
    minimum: int,
    distance: CachedDistance,
) -> None:
    while _size(starved, groups) < minimum:
        movable = [key for key in donor if key != donor_pivot]
        if not movable:
            break
        nearest = min(movable, key=lambda key: distance(key, starved_pivot))
        donor.remove(nearest)
        starved.add(nearest)


def _build_entry(
    node: Node, pivot: Any, keys: Set[Any], distance: CachedDistance
) -> RoutingEntry:
    child = Node(is_leaf=node.is_leaf)
    radius = 0.0
    for entry in node.entries:
        if entry.key not in keys:
            continue
        entry.distance_to_parent = distance(entry.key, pivot)
        child.entries.append(entry)
        radius = max(radius, entry.distance_to_parent + entry.covering_radius)
    return RoutingEntry(pivot, child, None, radius)


def split_node(tree: "MTree", node: Node, distance: CachedDistance) -> SplitResult:
    """Split an overflowing node into two routing entries.

    The returned entries carry no parent distance yet; the caller places them.
    """

    groups = _group_members(node)
    if len(groups) < 2:
        # Every member routes through the same pivot object.
        (pivot,) = groups
        for entry in node.entries:
            entry.distance_to_parent = distance(entry.key, pivot)
        half = len(node.entries) // 2
        first = Node(is_leaf=node.is_leaf, entries=node.entries[:half])
        second = Node(is_leaf=node.is_leaf, entries=node.entries[half:])
        tree.stats.splits += 1
        return (
            RoutingEntry(pivot, first, None, first.fit_radius()),
            RoutingEntry(pivot, second, None, second.fit_radius()),
        )

    (pivot1, first), (pivot2, second) = tree.split_policy.split(set(groups), distance)
    minimum = tree.min_node_capacity
    _top_up(first, pivot1, second, pivot2, groups, minimum, distance)
    _top_up(second, pivot2, first, pivot1, groups, minimum, distance)

    entry1 = _build_entry(node, pivot1, first, distance)
    entry2 = _build_entry(node, pivot2, second, distance)
    tree.stats.splits += 1
    LOGGER.debug(
        "Split %s node of %d entries into %d/%d around %r and %r",
        "leaf" if node.is_leaf else "internal",
        len(node.entries),
        len(entry1.subtree.entries),
        len(entry2.subtree.entries),
        pivot1,
        pivot2,
    )
    return entry1, entry2
