"""
pkgstate

Process-lifetime package state: an in-memory key-value cache whose entries
are computed lazily, overwritten explicitly, and reset to their declared
initial values on every (re)load.

The package-wide instance lives in ``pkgstate.state``.
"""

from .constants import ABSENT
from .domain.cache.entities import CacheEntry
from .domain.cache.value_objects import CacheKey, CacheStats, EntryState
from .exceptions import (
    ComputeFailedException,
    IdentityLookupException,
    KeyNotFoundException,
    ProcessCacheException,
    ReentrantAccessException,
)
from .services.cache.process_cache import ProcessCache, memoized

__version__ = "0.1.0"

__all__ = [
    "ABSENT",
    "CacheEntry",
    "CacheKey",
    "CacheStats",
    "EntryState",
    "ComputeFailedException",
    "IdentityLookupException",
    "KeyNotFoundException",
    "ProcessCacheException",
    "ReentrantAccessException",
    "ProcessCache",
    "memoized",
]
