"""
Core types for the object cache.

- CacheKey: opaque, hashable address of one stored record
- Helper for timezone-aware timestamps
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get current UTC time with timezone info."""
    return datetime.now(timezone.utc)


def utc_from_timestamp(ts: float) -> datetime:
    """Convert a POSIX timestamp to an aware UTC datetime."""
    return datetime.fromtimestamp(ts, tz=timezone.utc)


@dataclass(frozen=True)
class CacheKey:
    """Address of one stored record.

    Two keys are equal iff their values are equal. Use ``hashed`` for
    arbitrary strings such as URLs, ``verbatim`` when the value is already
    a stable identifier.
    """

    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("CacheKey value must not be empty")

    @classmethod
    def hashed(cls, value: str) -> CacheKey:
        """Create a key from the SHA-256 hex digest of ``value``."""
        return cls(hashlib.sha256(value.encode("utf-8")).hexdigest())

    @classmethod
    def verbatim(cls, value: str) -> CacheKey:
        """Create a key that stores ``value`` unchanged."""
        return cls(value)

    def __str__(self) -> str:
        return self.value
