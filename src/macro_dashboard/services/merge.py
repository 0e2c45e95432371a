"""Merge combinator for partially observed values."""

from typing import Optional, TypeVar

T = TypeVar("T")


def merge_observed(prior: T, observed: Optional[T]) -> T:
    """Return the observed value, or the prior one when nothing was observed."""
    return prior if observed is None else observed
