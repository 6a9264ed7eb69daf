"""
Cache of successful citation lookups, keyed by normalized citation.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from lexcerta.cache.lru import CacheStats, LRUCache
from lexcerta.external.base import CitationMatch


@dataclass(frozen=True)
class CachedLookup:
    """Matches returned by a successful lookup."""

    matches: List[CitationMatch] = field(default_factory=list)


class CitationCache:
    """LRU cache of citation lookups (only "ok" results are stored)."""

    def __init__(self, max_entries: int = 1000):
        self._cache: LRUCache[str, CachedLookup] = LRUCache(max_entries)

    def get(self, normalized_citation: str) -> Optional[CachedLookup]:
        return self._cache.get(normalized_citation)

    def set(self, normalized_citation: str, result: CachedLookup) -> None:
        self._cache.set(normalized_citation, result)

    def stats(self) -> CacheStats:
        return self._cache.stats()

    def clear(self) -> None:
        self._cache.clear()
