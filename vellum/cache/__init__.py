"""Pattern caching."""

from vellum.cache.pattern_cache import PatternCache, text_hash

__all__ = ["PatternCache", "text_hash"]
