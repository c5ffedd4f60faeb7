import pytest

from mtreex import MTree, SplitPolicy, validate_tree
from mtreex.core.nodes import LeafEntry


def _tree() -> MTree:
    tree = MTree(4, 2, split_policy=SplitPolicy.from_names("sorted"))
    for x in range(12):
        tree.add((x, x % 4))
    validate_tree(tree)
    return tree


def _first_leaf(tree: MTree):
    node = tree.root
    while not node.is_leaf:
        node = node.entries[0].subtree
    return node


def test_detects_wrong_parent_distance():
    tree = _tree()
    leaf = _first_leaf(tree)
    leaf.entries[0].distance_to_parent += 0.5
    with pytest.raises(AssertionError, match="parent distance"):
        validate_tree(tree)


def test_detects_radius_violation():
    tree = _tree()
    tree.root.entries[0].covering_radius = 0.0
    with pytest.raises(AssertionError):
        validate_tree(tree)


def test_detects_duplicates():
    tree = _tree()
    leaf = _first_leaf(tree)
    duplicate = leaf.entries[0]
    leaf.entries.append(LeafEntry(duplicate.data, duplicate.distance_to_parent, 99))
    with pytest.raises(AssertionError):
        validate_tree(tree)


def test_detects_underfull_node():
    tree = _tree()
    leaf = _first_leaf(tree)
    leaf.entries.clear()
    with pytest.raises(AssertionError):
        validate_tree(tree)


def test_detects_size_mismatch():
    tree = _tree()
    tree._size += 1
    with pytest.raises(AssertionError, match="reports"):
        validate_tree(tree)


def test_empty_tree_is_valid():
    validate_tree(MTree(4))
