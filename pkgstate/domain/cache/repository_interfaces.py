"""
Cache Repository Interfaces

Abstract repository interface for cache entry storage.
Lets the cache own its map through an injectable seam instead of
module-level mutable state.
"""

from abc import ABC, abstractmethod
from typing import Iterator, List, Optional

from .entities import CacheEntry
from .value_objects import CacheKey


class EntryRepository(ABC):
    """
    Abstract repository for cache entries.

    Implementations are not required to be thread-safe; the owning cache
    serializes access.
    """

    @abstractmethod
    def find(self, key: CacheKey) -> Optional[CacheEntry]:
        """Find entry by key."""
        pass

    @abstractmethod
    def save(self, entry: CacheEntry) -> None:
        """Insert or replace the entry stored under its key."""
        pass

    @abstractmethod
    def delete(self, key: CacheKey) -> bool:
        """Delete entry by key. Returns whether it existed."""
        pass

    @abstractmethod
    def replace_all(self, entries: List[CacheEntry]) -> None:
        """Atomically swap the full set of entries."""
        pass

    @abstractmethod
    def all(self) -> List[CacheEntry]:
        """All entries in insertion order."""
        pass

    def __iter__(self) -> Iterator[CacheEntry]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self.all())
