"""
In-memory storage engine.

Dict-backed engine for tests and short-lived caches. Records vanish with
the process. Keeps insertion order for enumeration.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from objcache.cache.base import StorageEngine
from objcache.exceptions import RecordNotFoundError
from objcache.logging import get_logger
from objcache.types import CacheKey, utc_now

logger = get_logger(__name__)


@dataclass
class _Record:
    data: bytes
    created_at: datetime
    accessed_at: datetime
    modified_at: datetime


class MemoryStorage(StorageEngine):
    """Storage engine keeping records in a dict."""

    def __init__(self) -> None:
        self._records: dict[CacheKey, _Record] = {}

    async def write(self, data: bytes, key: CacheKey) -> None:
        now = utc_now()
        existing = self._records.get(key)
        created_at = existing.created_at if existing else now
        self._records[key] = _Record(
            data=bytes(data), created_at=created_at, accessed_at=now, modified_at=now
        )

    async def write_many(self, items: Sequence[tuple[CacheKey, bytes]]) -> None:
        for key, data in items:
            await self.write(data, key)

    async def read(self, key: CacheKey) -> bytes | None:
        record = self._records.get(key)
        if record is None:
            return None
        record.accessed_at = utc_now()
        return record.data

    async def read_many(self, keys: Sequence[CacheKey]) -> list[bytes]:
        results: list[bytes] = []
        for key in keys:
            data = await self.read(key)
            if data is not None:
                results.append(data)
        return results

    async def remove(self, key: CacheKey) -> None:
        try:
            del self._records[key]
        except KeyError:
            raise RecordNotFoundError(
                "No record to remove",
                context={"engine": self.describe(), "key": key.value},
            ) from None

    async def remove_all(self) -> None:
        count = len(self._records)
        self._records.clear()
        logger.debug("Cleared memory storage", removed=count)

    async def all_keys(self) -> list[CacheKey]:
        return list(self._records)

    async def key_count(self) -> int:
        return len(self._records)

    async def created_at(self, key: CacheKey) -> datetime | None:
        record = self._records.get(key)
        return record.created_at if record else None

    async def last_accessed(self, key: CacheKey) -> datetime | None:
        record = self._records.get(key)
        return record.accessed_at if record else None

    async def last_modified(self, key: CacheKey) -> datetime | None:
        record = self._records.get(key)
        return record.modified_at if record else None
