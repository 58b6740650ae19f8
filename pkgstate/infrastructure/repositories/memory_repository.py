"""
In-Memory Entry Repository Implementation

Infrastructure implementation of the entry repository interface backed
by a plain dict, preserving insertion order.
"""

from typing import Dict, List, Optional

from ...domain.cache.entities import CacheEntry
from ...domain.cache.repository_interfaces import EntryRepository
from ...domain.cache.value_objects import CacheKey


class InMemoryEntryRepository(EntryRepository):
    """Dict-backed implementation of the entry repository."""

    def __init__(self) -> None:
        self._entries: Dict[str, CacheEntry] = {}

    def find(self, key: CacheKey) -> Optional[CacheEntry]:
        return self._entries.get(key.value)

    def save(self, entry: CacheEntry) -> None:
        self._entries[entry.key.value] = entry

    def delete(self, key: CacheKey) -> bool:
        return self._entries.pop(key.value, None) is not None

    def replace_all(self, entries: List[CacheEntry]) -> None:
        # Rebinding keeps readers holding the old dict consistent
        self._entries = {entry.key.value: entry for entry in entries}

    def all(self) -> List[CacheEntry]:
        return list(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)
