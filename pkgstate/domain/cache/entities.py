"""
Cache Domain Entities

Core entity of the package state cache.
Encapsulates the populated/unpopulated lifecycle of a single key.
"""

import copy
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from ...constants import ABSENT
from .value_objects import CacheKey, EntryState

logger = logging.getLogger(__name__)

ComputeFn = Callable[[], Any]


def _copy_default(default: Any) -> Any:
    """
    Deep copy of a declared default, so mutating a returned value cannot
    alter it. Objects that cannot be copied (locks, clients, generators)
    are shared as they are.
    """
    try:
        return copy.deepcopy(default)
    except (TypeError, copy.Error):
        logger.debug(
            "Default of type %s is not copyable, sharing it", type(default).__name__
        )
        return default


@dataclass
class CacheEntry:
    """
    Cache entry entity.

    Holds the current value of one key together with the declaration it
    is reset to: either a default value, a compute function, or nothing.
    Ad-hoc entries (created by an overwrite of an undeclared key) are not
    declared and do not survive a reset.
    """

    key: CacheKey
    value: Any = ABSENT
    populated: bool = False
    compute: Optional[ComputeFn] = None
    default: Any = ABSENT
    declared: bool = True
    access_count: int = 0
    compute_count: int = 0
    populated_at: Optional[datetime] = None
    lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )
    owner: Optional[int] = field(default=None, repr=False, compare=False)

    @classmethod
    def declare(
        cls,
        key: CacheKey,
        default: Any = ABSENT,
        compute: Optional[ComputeFn] = None,
    ) -> "CacheEntry":
        """Create a declared entry in its initial state."""
        if default is not ABSENT and compute is not None:
            raise ValueError(
                f"Key '{key}' takes either a default or a compute function, not both"
            )
        if compute is not None and not callable(compute):
            raise ValueError(f"Compute function for key '{key}' must be callable")

        entry = cls(key=key, default=default, compute=compute)
        entry.seed()
        return entry

    @classmethod
    def adhoc(cls, key: CacheKey, value: Any) -> "CacheEntry":
        """Create an undeclared entry holding an explicitly written value."""
        entry = cls(key=key, declared=False)
        entry.populate(value)
        return entry

    def seed(self) -> None:
        """Return the entry to its declared initial state."""
        if self.default is ABSENT:
            self.value = ABSENT
            self.populated = False
            self.populated_at = None
        else:
            self.populate(_copy_default(self.default))

    def populate(self, value: Any) -> Any:
        """Store a value, mark the entry populated and return the previous value."""
        previous = self.value
        self.value = value
        self.populated = True
        self.populated_at = datetime.now(timezone.utc)
        return previous

    def read(self) -> Any:
        """Record access and return the current value."""
        self.access_count += 1
        return self.value

    def fresh(self) -> "CacheEntry":
        """New entry object with the same declaration, in its initial state."""
        return CacheEntry.declare(self.key, default=self.default, compute=self.compute)

    @property
    def can_compute(self) -> bool:
        return self.compute is not None

    @property
    def resolvable(self) -> bool:
        """Whether a read can succeed: a value is present or can be computed."""
        return self.populated or self.can_compute

    def get_state(self) -> EntryState:
        """Get current state of the entry."""
        if self.populated:
            return EntryState.POPULATED
        return EntryState.UNPOPULATED
