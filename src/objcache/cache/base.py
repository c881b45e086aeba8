"""
Storage engine interface consumed by the object cache.

A storage engine is a byte-oriented key-value store addressed by CacheKey.
It owns everything about persistence: layout, atomicity of single writes,
enumeration and record metadata. ObjectCache only forwards to it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime

from objcache.types import CacheKey


class StorageEngine(ABC):
    """Abstract interface for byte-level storage engines.

    Implementations wrap their backend-specific failures in StorageError.
    A missing key is never an error for reads or metadata lookups.
    """

    async def init(self) -> None:
        """Prepare the engine for use. Safe to call more than once."""
        return None

    async def close(self) -> None:
        """Release engine resources."""
        return None

    @abstractmethod
    async def write(self, data: bytes, key: CacheKey) -> None:
        """Store ``data`` under ``key``, replacing any previous record.

        Must be atomic per key: a failed write leaves the previous record
        (or no record) in place.
        """
        ...

    @abstractmethod
    async def write_many(self, items: Sequence[tuple[CacheKey, bytes]]) -> None:
        """Store several records. Need not be atomic across keys."""
        ...

    @abstractmethod
    async def read(self, key: CacheKey) -> bytes | None:
        """Read the record for ``key``, or None if absent."""
        ...

    @abstractmethod
    async def read_many(self, keys: Sequence[CacheKey]) -> list[bytes]:
        """Read several records in input order, omitting missing keys."""
        ...

    @abstractmethod
    async def remove(self, key: CacheKey) -> None:
        """Delete the record for ``key``."""
        ...

    @abstractmethod
    async def remove_all(self) -> None:
        """Delete every record."""
        ...

    @abstractmethod
    async def all_keys(self) -> list[CacheKey]:
        """List every stored key in engine-defined order."""
        ...

    async def key_count(self) -> int:
        """Count stored keys."""
        return len(await self.all_keys())

    @abstractmethod
    async def created_at(self, key: CacheKey) -> datetime | None:
        """Creation time of the record, or None if absent."""
        ...

    @abstractmethod
    async def last_accessed(self, key: CacheKey) -> datetime | None:
        """Last access time of the record, or None if absent."""
        ...

    @abstractmethod
    async def last_modified(self, key: CacheKey) -> datetime | None:
        """Last modification time of the record, or None if absent."""
        ...

    def describe(self) -> str:
        """Short human-readable identity used in log records."""
        return self.__class__.__name__
