"""In-process caching helpers."""

from .memory_cache import MemoryCache

__all__ = ["MemoryCache"]
