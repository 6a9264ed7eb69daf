"""
Cache of retrieved opinion text, keyed by CourtListener cluster id.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from lexcerta.cache.lru import CacheStats, LRUCache
from lexcerta.external.base import OpinionText


@dataclass(frozen=True)
class CachedOpinions:
    """Opinions returned by a successful cluster fetch."""

    opinions: List[OpinionText] = field(default_factory=list)


class OpinionCache:
    """LRU cache of cluster opinion text (only "ok" results are stored)."""

    def __init__(self, max_entries: int = 200):
        self._cache: LRUCache[int, CachedOpinions] = LRUCache(max_entries)

    def get(self, cluster_id: int) -> Optional[CachedOpinions]:
        return self._cache.get(int(cluster_id))

    def set(self, cluster_id: int, result: CachedOpinions) -> None:
        self._cache.set(int(cluster_id), result)

    def stats(self) -> CacheStats:
        return self._cache.stats()

    def clear(self) -> None:
        self._cache.clear()
