"""Core data structures of the M-tree: entries, nodes and the tree facade."""

from .nodes import Entry, LeafEntry, Node, RoutingEntry, contains_data
from .tree import DEFAULT_MAX_NODE_CAPACITY, MTree, TreeStats
from .validate import validate_tree

__all__ = [
    "DEFAULT_MAX_NODE_CAPACITY",
    "Entry",
    "LeafEntry",
    "MTree",
    "Node",
    "RoutingEntry",
    "TreeStats",
    "contains_data",
    "validate_tree",
]
