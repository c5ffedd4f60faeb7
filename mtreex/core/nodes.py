from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, List, Optional, Union

# Radii accumulated as parent distance + child radius may differ from a direct
# distance by floating point rounding.
RADIUS_TOLERANCE = 1e-9


def within_radius(value: float, radius: float) -> bool:
    """`value <= radius` up to the rounding slack of accumulated radii."""

    return value <= radius * (1.0 + RADIUS_TOLERANCE) + RADIUS_TOLERANCE


@dataclass(eq=False)
class LeafEntry:
    """A stored data object inside a leaf node."""

    data: Any
    distance_to_parent: Optional[float]
    ordinal: int

    @property
    def key(self) -> Any:
        return self.data

    @property
    def covering_radius(self) -> float:
        return 0.0


@dataclass(eq=False)
class RoutingEntry:
    """A pivot object and the subtree it covers inside an internal node."""

    pivot: Any
    subtree: "Node"
    distance_to_parent: Optional[float]
    covering_radius: float

    @property
    def key(self) -> Any:
        return self.pivot


Entry = Union[LeafEntry, RoutingEntry]


@dataclass(eq=False)
class Node:
    is_leaf: bool
    entries: List[Entry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def fit_radius(self) -> float:
        """Covering radius bound derived from stored parent distances only.

        Valid for a node that sits under a routing entry: every member carries
        its distance to that entry's pivot.
        """

        radius = 0.0
        for entry in self.entries:
            bound = float(entry.distance_to_parent) + entry.covering_radius
            if bound > radius:
                radius = bound
        return radius

    def iter_data(self) -> Iterator[Any]:
        stack = [self]
        while stack:
            node = stack.pop()
            if node.is_leaf:
                for entry in node.entries:
                    yield entry.data
            else:
                stack.extend(entry.subtree for entry in reversed(node.entries))

    def height(self) -> int:
        depth = 1
        node = self
        while not node.is_leaf:
            node = node.entries[0].subtree
            depth += 1
        return depth


def contains_data(root: Node | None, data: Any, distance: Callable[[Any, Any], float]) -> bool:
    """Exact membership test that skips subtrees whose radius excludes `data`."""

    if root is None:
        return False
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_leaf:
            if any(entry.data == data for entry in node.entries):
                return True
            continue
        for entry in node.entries:
            if within_radius(distance(data, entry.pivot), entry.covering_radius):
                stack.append(entry.subtree)
    return False
