"""mtreex: an M-tree for exact similarity search in arbitrary metric spaces.

Quick Start
-----------
>>> from mtreex import MTree
>>>
>>> tree = MTree(max_node_capacity=8)
>>> for point in [(1, 1), (2, 2), (3, 3), (10, 10)]:
...     tree.add(point)
>>> [item.data for item in tree.range_query((0, 0), 3)]
[(1, 1), (2, 2)]
>>> [item.data for item in tree.limit_query((0, 0), 1)]
[(1, 1)]

Any metric works as long as the data objects are hashable:

>>> words = MTree(distance_function=my_edit_distance)  # doctest: +SKIP

Classes
-------
MTree : The index; add/remove objects and run range and limit queries.
SplitPolicy : Promotion/partition pair applied when a node overflows.
ResultItem : A query result (data object and its distance to the query).
"""

from importlib.metadata import version as _pkg_version

try:
    __version__ = _pkg_version("mtreex")
except Exception:  # pragma: no cover - best effort during local development
    __version__ = "0.0.1"

from .core import MTree, TreeStats, validate_tree
from .algo import (
    RandomPromotion,
    SplitPolicy,
    balanced_partition,
    hyperplane_partition,
    max_spread_promotion,
    sorted_promotion,
)
from .metrics import (
    CachedDistance,
    available_metrics,
    euclidean_distance,
    get_metric,
    register_metric,
)
from .queries import Query, ResultItem

__all__ = [
    "__version__",
    "MTree",
    "TreeStats",
    "validate_tree",
    "SplitPolicy",
    "RandomPromotion",
    "balanced_partition",
    "hyperplane_partition",
    "max_spread_promotion",
    "sorted_promotion",
    "CachedDistance",
    "available_metrics",
    "euclidean_distance",
    "get_metric",
    "register_metric",
    "Query",
    "ResultItem",
]
