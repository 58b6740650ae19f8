"""
Process Cache Service

Process-lifetime key-value store that lazily computes and memoizes values,
supports explicit overwrite, and resets to its declared initial entries.

Locking: a store-level RLock guards the entry map and counters. Each entry
has its own lock, held while computing or overwriting, so a compute function
runs once per population even when several threads read the same key first.
Lock order is always entry lock, then store lock.
"""

import threading
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Union

import structlog
from opentelemetry import trace

from ...constants import ABSENT
from ...core.config import get_settings
from ...domain.cache.entities import CacheEntry, ComputeFn
from ...domain.cache.repository_interfaces import EntryRepository
from ...domain.cache.value_objects import CacheKey, CacheStats, EntryState
from ...exceptions import (
    ComputeFailedException,
    KeyNotFoundException,
    ReentrantAccessException,
)
from ...infrastructure.repositories.memory_repository import InMemoryEntryRepository

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

KeyLike = Union[str, CacheKey]

_COUNTERS = ("hits", "computes", "compute_failures", "sets", "invalidations", "resets")


class ProcessCache:
    """
    In-memory package state.

    Entries are declared with a default value, a compute function, or
    neither. ``reset()`` throws away every entry and reseeds the declared
    ones, so nothing written since survives.
    """

    def __init__(
        self,
        name: str = "pkgstate",
        defaults: Optional[Mapping[str, Any]] = None,
        computes: Optional[Mapping[str, ComputeFn]] = None,
        repository: Optional[EntryRepository] = None,
        max_key_length: Optional[int] = None,
    ):
        """
        Initialize the cache and seed its initial entries.

        Args:
            name: Name used in logs, spans and stats
            defaults: Keys populated with a default value at every reset
            computes: Keys computed lazily on first read after every reset
            repository: Entry storage, in-memory by default
            max_key_length: Key length limit, from settings by default
        """
        self.name = name
        self.repository = (
            repository if repository is not None else InMemoryEntryRepository()
        )
        self.max_key_length = (
            max_key_length
            if max_key_length is not None
            else get_settings().MAX_KEY_LENGTH
        )

        self._lock = threading.RLock()
        self._declarations: Dict[str, CacheEntry] = {}
        self._counters: Dict[str, int] = dict.fromkeys(_COUNTERS, 0)

        for key, value in (defaults or {}).items():
            self.declare(key, default=value)
        for key, compute in (computes or {}).items():
            self.declare(key, compute=compute)

    # ========================================================================
    # Declarations
    # ========================================================================

    def declare(
        self,
        key: KeyLike,
        default: Any = ABSENT,
        compute: Optional[ComputeFn] = None,
    ) -> None:
        """
        Add a key to the initial set and seed it now.

        Redeclaring a key replaces its declaration and its current value.
        """
        cache_key = self._key(key)
        template = CacheEntry.declare(cache_key, default=default, compute=compute)

        with self._lock:
            self._declarations[cache_key.value] = template
            self.repository.save(template.fresh())

        logger.debug(
            "Cache key declared",
            cache=self.name,
            key=cache_key.value,
            has_default=default is not ABSENT,
            has_compute=compute is not None,
        )

    def declared_keys(self) -> List[str]:
        with self._lock:
            return list(self._declarations)

    # ========================================================================
    # Core operations
    # ========================================================================

    def get(self, key: KeyLike) -> Any:
        """
        Return the current value for key.

        An unpopulated entry with a compute function is computed once and
        memoized.

        Raises:
            KeyNotFoundException: No value and no compute function
            ComputeFailedException: The compute function raised. A compute
                function that reads or writes its own key fails this way,
                with ReentrantAccessException as the cause
        """
        cache_key = self._key(key)

        with self._lock:
            entry = self.repository.find(cache_key)
            if entry is None or not entry.resolvable:
                raise KeyNotFoundException(cache_key.value, self.name)
            if entry.populated:
                self._counters["hits"] += 1
                return entry.read()

        return self._compute(cache_key)

    def set(self, key: KeyLike, value: Any) -> Any:
        """
        Overwrite the value for key and mark it populated.

        Returns:
            The previous value, or ABSENT if there was none
        """
        cache_key = self._key(key)

        with self._lock:
            if self.repository.find(cache_key) is None:
                self.repository.save(CacheEntry.adhoc(cache_key, value))
                self._counters["sets"] += 1
                logger.debug("Cache key set", cache=self.name, key=cache_key.value)
                return ABSENT

        with self._claim(cache_key) as entry:
            if entry is None:
                # Dropped by a concurrent invalidate; write it as a new key
                return self.set(cache_key, value)
            with self._lock:
                previous = entry.populate(value)
                self._counters["sets"] += 1

        logger.debug("Cache key set", cache=self.name, key=cache_key.value)
        return previous

    def reset(self) -> None:
        """Drop every entry and reseed the declared initial set."""
        with self._lock:
            self.repository.replace_all(
                [template.fresh() for template in self._declarations.values()]
            )
            self._counters["resets"] += 1
            entries = len(self._declarations)

        logger.info("Cache reset", cache=self.name, entries=entries)

    # ========================================================================
    # Supplementary operations
    # ========================================================================

    def invalidate(self, key: KeyLike) -> bool:
        """
        Return one entry to its declared initial state.

        Undeclared keys are removed. Returns whether the key existed.
        """
        cache_key = self._key(key)

        with self._lock:
            if self.repository.find(cache_key) is None:
                return False
            template = self._declarations.get(cache_key.value)
            if template is None:
                self.repository.delete(cache_key)
            else:
                self.repository.save(template.fresh())
            self._counters["invalidations"] += 1

        logger.debug("Cache key invalidated", cache=self.name, key=cache_key.value)
        return True

    @contextmanager
    def override(self, key: KeyLike, value: Any) -> Iterator[Any]:
        """Temporarily set a value, restoring the previous state on exit."""
        previous = self.set(key, value)
        try:
            yield value
        finally:
            if previous is ABSENT:
                self.invalidate(key)
            else:
                self.set(key, previous)

    def contains(self, key: KeyLike) -> bool:
        """Whether key has a value or a compute function."""
        cache_key = self._key(key)
        with self._lock:
            entry = self.repository.find(cache_key)
            return entry is not None and entry.resolvable

    def is_populated(self, key: KeyLike) -> bool:
        cache_key = self._key(key)
        with self._lock:
            entry = self.repository.find(cache_key)
            return entry is not None and entry.populated

    def keys(self) -> List[str]:
        """Keys in declaration order, followed by ad-hoc keys in write order."""
        with self._lock:
            return [entry.key.value for entry in self.repository.all()]

    def describe(self) -> Dict[str, EntryState]:
        """Snapshot of every key's state."""
        with self._lock:
            return {
                entry.key.value: entry.get_state() for entry in self.repository.all()
            }

    def stats(self) -> CacheStats:
        """Cumulative counters plus current entry gauges."""
        with self._lock:
            entries = self.repository.all()
            return CacheStats(
                name=self.name,
                entries=len(entries),
                populated=sum(1 for entry in entries if entry.populated),
                **self._counters,
            )

    # ========================================================================
    # Internals
    # ========================================================================

    def _key(self, key: KeyLike) -> CacheKey:
        return CacheKey.of(key, self.max_key_length)

    @contextmanager
    def _claim(self, cache_key: CacheKey) -> Iterator[Optional[CacheEntry]]:
        """Hold the lock of the live entry for key; yields None if absent."""
        while True:
            with self._lock:
                entry = self.repository.find(cache_key)
            if entry is None:
                yield None
                return
            if entry.owner == threading.get_ident():
                # Waiting on our own lock would never return
                raise ReentrantAccessException(cache_key.value, self.name)
            with entry.lock:
                entry.owner = threading.get_ident()
                try:
                    with self._lock:
                        is_live = self.repository.find(cache_key) is entry
                    if is_live:
                        yield entry
                        return
                finally:
                    entry.owner = None
            # Replaced by reset or invalidate while waiting; retry on the new entry

    def _compute(self, cache_key: CacheKey) -> Any:
        with self._claim(cache_key) as entry:
            with self._lock:
                if entry is None or not entry.resolvable:
                    raise KeyNotFoundException(cache_key.value, self.name)
                if entry.populated:
                    # Another thread computed it while we waited
                    self._counters["hits"] += 1
                    return entry.read()

            with tracer.start_as_current_span("process_cache.compute") as span:
                span.set_attribute("cache.name", self.name)
                span.set_attribute("cache.key", cache_key.value)
                try:
                    value = entry.compute()
                except Exception as e:
                    with self._lock:
                        self._counters["compute_failures"] += 1
                    span.record_exception(e)
                    span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                    logger.warning(
                        "Cache compute failed",
                        cache=self.name,
                        key=cache_key.value,
                        error=str(e),
                    )
                    raise ComputeFailedException(cache_key.value, e) from e

            with self._lock:
                entry.populate(value)
                entry.compute_count += 1
                self._counters["computes"] += 1
                result = entry.read()

        logger.debug("Cache key computed", cache=self.name, key=cache_key.value)
        return result

    # ========================================================================
    # Mapping-style access
    # ========================================================================

    def __getitem__(self, key: KeyLike) -> Any:
        return self.get(key)

    def __setitem__(self, key: KeyLike, value: Any) -> None:
        self.set(key, value)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, (str, CacheKey)):
            return False
        try:
            return self.contains(key)
        except ValueError:
            return False

    def __len__(self) -> int:
        with self._lock:
            return len(self.repository)

    def __repr__(self) -> str:
        return f"ProcessCache(name={self.name!r}, keys={self.keys()!r})"


def memoized(cache: ProcessCache, key: KeyLike) -> Callable[[ComputeFn], Callable[[], Any]]:
    """
    Decorator registering a zero-argument function as the compute function
    for key. Calling the decorated function reads through the cache.
    """

    def decorator(func: ComputeFn) -> Callable[[], Any]:
        cache.declare(key, compute=func)

        @wraps(func)
        def wrapper() -> Any:
            return cache.get(key)

        return wrapper

    return decorator
