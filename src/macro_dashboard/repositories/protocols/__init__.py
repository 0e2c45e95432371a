"""Repository protocol definitions (interfaces)."""

from macro_dashboard.repositories.protocols.cache_store import CacheStore

__all__ = [
    "CacheStore",
]
