from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, Optional

from mtreex.core.nodes import Entry, Node, RoutingEntry, within_radius
from mtreex.logging import get_logger
from mtreex.metrics import CachedDistance

if TYPE_CHECKING:  # pragma: no cover
    from mtreex.core.tree import MTree

LOGGER = get_logger("algo.remove")


def remove(tree: "MTree", data: Any, distance: CachedDistance) -> bool:
    """Remove `data` from `tree`; returns False when it is not stored."""

    root = tree.root
    if root is None:
        return False
    if root.is_leaf:
        found = _remove_leaf_entry(root, data)
    else:
        found = _remove_below(tree, root, data, distance)
    if not found:
        return False
    _repair_root(tree)
    return True


def _remove_leaf_entry(node: Node, data: Any) -> bool:
    for index, entry in enumerate(node.entries):
        if entry.data == data:
            del node.entries[index]
            return True
    return False


def _remove_below(tree: "MTree", node: Node, data: Any, distance: CachedDistance) -> bool:
    # Covering radii may overlap, so every entry that could hold `data` is tried.
    for entry in list(node.entries):
        if not within_radius(distance(data, entry.pivot), entry.covering_radius):
            continue
        child = entry.subtree
        if child.is_leaf:
            found = _remove_leaf_entry(child, data)
        else:
            found = _remove_below(tree, child, data, distance)
        if not found:
            continue

        if len(child.entries) < tree.min_node_capacity:
            _repair_underflow(tree, node, entry, distance)
        else:
            entry.covering_radius = min(entry.covering_radius, child.fit_radius())
        return True
    return False


def _repair_underflow(
    tree: "MTree", node: Node, entry: RoutingEntry, distance: CachedDistance
) -> None:
    """Borrow into, or merge away, the underflowing child of `entry`."""

    siblings = [candidate for candidate in node.entries if candidate is not entry]
    if not siblings:
        # Only reachable when min_node_capacity == 1: the lone child is empty.
        node.entries.remove(entry)
        return

    donor: Optional[RoutingEntry] = None
    donated: Optional[Entry] = None
    donated_distance = math.inf
    target: Optional[RoutingEntry] = None
    target_distance = math.inf

    for sibling in siblings:
        if len(sibling.subtree.entries) > tree.min_node_capacity:
            for member in sibling.subtree.entries:
                value = distance(member.key, entry.pivot)
                if value < donated_distance:
                    donor, donated, donated_distance = sibling, member, value
        else:
            value = distance(sibling.pivot, entry.pivot)
            if value < target_distance:
                target, target_distance = sibling, value

    if donor is not None and donated is not None:
        donor.subtree.entries.remove(donated)
        donor.covering_radius = min(donor.covering_radius, donor.subtree.fit_radius())
        donated.distance_to_parent = donated_distance
        entry.subtree.entries.append(donated)
        entry.covering_radius = max(
            entry.covering_radius, donated_distance + donated.covering_radius
        )
        tree.stats.borrows += 1
        LOGGER.debug("Borrowed %r from %r into %r", donated.key, donor.pivot, entry.pivot)
        return

    assert target is not None
    for member in entry.subtree.entries:
        member.distance_to_parent = distance(member.key, target.pivot)
        target.subtree.entries.append(member)
        target.covering_radius = max(
            target.covering_radius, member.distance_to_parent + member.covering_radius
        )
    node.entries.remove(entry)
    tree.stats.merges += 1
    LOGGER.debug(
        "Merged %d entries of %r into %r", len(entry.subtree.entries), entry.pivot, target.pivot
    )


def _repair_root(tree: "MTree") -> None:
    root = tree.root
    assert root is not None
    while not root.is_leaf and len(root.entries) == 1:
        root = root.entries[0].subtree
        for member in root.entries:
            member.distance_to_parent = None
        LOGGER.debug("Collapsed root; height is now %d", root.height())
    tree.root = root if root.entries else None
