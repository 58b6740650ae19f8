"""
Cache Value Objects

Immutable value objects for the package state cache.
Provides key validation, entry states and observable counters.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from pydantic import BaseModel, Field, field_validator

from ...constants import MAX_KEY_LENGTH


class EntryState(str, Enum):
    """Cache entry state enumeration."""

    UNPOPULATED = "unpopulated"
    POPULATED = "populated"


@dataclass(frozen=True)
class CacheKey:
    """
    Immutable cache key value object.

    Any string is a valid key, up to a configurable length.
    """

    value: str
    max_length: int = MAX_KEY_LENGTH

    def __post_init__(self) -> None:
        """Validate cache key format."""
        if not isinstance(self.value, str):
            raise ValueError(
                f"Cache key must be a string, got {type(self.value).__name__}"
            )

        if len(self.value) > self.max_length:
            raise ValueError(f"Cache key too long (max {self.max_length} characters)")

    @classmethod
    def of(
        cls, key: Union[str, "CacheKey"], max_length: int = MAX_KEY_LENGTH
    ) -> "CacheKey":
        """Coerce a raw string or an existing key into a validated CacheKey."""
        if isinstance(key, CacheKey):
            return key
        return cls(key, max_length)

    def __str__(self) -> str:
        return self.value


class CacheStats(BaseModel):
    """Cache operation counters for monitoring.

    Counters are cumulative for the lifetime of the cache instance and are
    not cleared by reset; the gauges describe the current entries.
    """

    name: str = Field(..., description="Name of the cache instance")
    hits: int = Field(0, ge=0, description="Reads served from a populated entry")
    computes: int = Field(0, ge=0, description="Successful compute invocations")
    compute_failures: int = Field(0, ge=0, description="Compute invocations that raised")
    sets: int = Field(0, ge=0, description="Explicit overwrites")
    invalidations: int = Field(0, ge=0, description="Single-entry invalidations")
    resets: int = Field(0, ge=0, description="Full resets")
    entries: int = Field(0, ge=0, description="Current number of entries")
    populated: int = Field(0, ge=0, description="Current number of populated entries")

    @field_validator("populated")
    @classmethod
    def validate_populated(cls, v, info):
        entries = info.data.get("entries")
        if entries is not None and v > entries:
            raise ValueError("Populated entries cannot exceed total entries")
        return v

    @property
    def reads(self) -> int:
        """Total successful reads (hits plus first computes)."""
        return self.hits + self.computes

    @property
    def hit_rate(self) -> float:
        """Fraction of successful reads that were served from memory."""
        if self.reads == 0:
            return 0.0
        return self.hits / self.reads
