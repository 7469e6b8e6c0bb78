"""Response cache module."""

from .cache import JsonCache, cached, cached_opt, read_cache, write_cache

__all__ = ['JsonCache', 'cached', 'cached_opt', 'read_cache', 'write_cache']
