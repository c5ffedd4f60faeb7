"""Range and limit (k-NN) queries."""

from .search import Query, ResultItem, search

__all__ = ["Query", "ResultItem", "search"]
