"""Repository layer - data access abstractions and implementations."""

from macro_dashboard.repositories.protocols import CacheStore

__all__ = [
    "CacheStore",
]
