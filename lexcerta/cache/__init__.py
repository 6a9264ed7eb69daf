"""
In-memory caches sitting in front of the CourtListener client.
"""

from lexcerta.cache.lru import LRUCache, CacheStats
from lexcerta.cache.citation_cache import CitationCache, CachedLookup
from lexcerta.cache.opinion_cache import OpinionCache, CachedOpinions

__all__ = [
    "LRUCache",
    "CacheStats",
    "CitationCache",
    "CachedLookup",
    "OpinionCache",
    "CachedOpinions",
]
