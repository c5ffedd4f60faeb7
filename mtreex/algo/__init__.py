"""Structural algorithms: split policies, insertion and deletion."""

from .split import (
    PARTITIONS,
    PROMOTIONS,
    RandomPromotion,
    SplitPolicy,
    balanced_partition,
    hyperplane_partition,
    max_spread_promotion,
    sorted_promotion,
)
from .insert import insert, split_node
from .remove import remove

__all__ = [
    "PARTITIONS",
    "PROMOTIONS",
    "RandomPromotion",
    "SplitPolicy",
    "balanced_partition",
    "hyperplane_partition",
    "insert",
    "max_spread_promotion",
    "remove",
    "sorted_promotion",
    "split_node",
]
