"""Whole-tree consistency checks used by the test-suite and replay tooling."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Set

from mtreex.core.nodes import Node, within_radius

if TYPE_CHECKING:  # pragma: no cover
    from mtreex.core.tree import MTree


def _fail(message: str) -> None:
    raise AssertionError(message)


def _check_node(
    tree: "MTree",
    node: Node,
    pivot: Any,
    depth: int,
    seen: Set[Any],
    leaf_depths: Set[int],
) -> List[Any]:
    count = len(node.entries)
    if count > tree.max_node_capacity:
        _fail(f"Node at depth {depth} holds {count} entries, above capacity {tree.max_node_capacity}.")
    if pivot is None:
        if count == 0:
            _fail("Root node is empty; an empty tree must have no root.")
        if not node.is_leaf and count < 2:
            _fail("Internal root node must hold at least two entries.")
    elif count < tree.min_node_capacity:
        _fail(f"Node under {pivot!r} holds {count} entries, below minimum {tree.min_node_capacity}.")

    objects: List[Any] = []
    for entry in node.entries:
        if pivot is None:
            if entry.distance_to_parent is not None:
                _fail(f"Root-level entry {entry.key!r} carries a parent distance.")
        else:
            expected = tree.distance(entry.key, pivot)
            if entry.distance_to_parent != expected:
                _fail(
                    f"Entry {entry.key!r} caches parent distance {entry.distance_to_parent!r}, "
                    f"expected {expected!r} to {pivot!r}."
                )

        if node.is_leaf:
            if entry.data in seen:
                _fail(f"Duplicate object {entry.data!r}.")
            seen.add(entry.data)
            objects.append(entry.data)
            continue

        members = _check_node(tree, entry.subtree, entry.pivot, depth + 1, seen, leaf_depths)
        for data in members:
            value = tree.distance(data, entry.pivot)
            if not within_radius(value, entry.covering_radius):
                _fail(
                    f"Object {data!r} lies at {value!r} from pivot {entry.pivot!r}, "
                    f"outside covering radius {entry.covering_radius!r}."
                )
        objects.extend(members)

    if node.is_leaf:
        leaf_depths.add(depth)
    return objects


def validate_tree(tree: "MTree") -> None:
    """Walk the whole tree and raise AssertionError on any broken invariant.

    Checked: node capacities, covering radii, cached parent distances, absence
    of duplicates, equal leaf depth and the stored object count.
    """

    root = tree.root
    if root is None:
        if len(tree) != 0:
            _fail(f"Empty tree reports {len(tree)} objects.")
        return

    seen: Set[Any] = set()
    leaf_depths: Set[int] = set()
    _check_node(tree, root, None, 0, seen, leaf_depths)
    if len(leaf_depths) != 1:
        _fail(f"Leaves found at different depths {sorted(leaf_depths)}.")
    if len(seen) != len(tree):
        _fail(f"Tree reports {len(tree)} objects but stores {len(seen)}.")
