"""Shared test utilities for mtreex."""

from .datasets import (
    gaussian_points,
    integer_points,
    levenshtein,
)

__all__ = ["gaussian_points", "integer_points", "levenshtein"]
