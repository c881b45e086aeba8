"""
Typed object cache over a byte-oriented storage engine.

ObjectCache encodes values with an ObjectCodec and forwards the bytes to a
StorageEngine. Every public operation holds the instance lock for its whole
duration, so operations on one cache never interleave: batch reads and
enumerations see a consistent view, at the cost of serializing unrelated keys.

Read policy:
- A missing key, missing metadata, or a record that does not decode into the
  requested type on a single read all come back as None.
- A batch read is all-or-nothing: if any record fails to decode, the whole
  result is an empty list.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import datetime
from types import TracebackType
from typing import Any, TypeVar

from objcache.cache.base import StorageEngine
from objcache.cache.codec import ObjectCodec
from objcache.cache.factory import create_storage
from objcache.config import Settings, get_settings
from objcache.exceptions import DecodingError, EncodingError
from objcache.logging import get_logger, log_context, setup_logging
from objcache.types import CacheKey

logger = get_logger(__name__)

T = TypeVar("T")


class ObjectCache:
    """Concurrency-safe, typed facade over a StorageEngine.

    Usage:
        async with ObjectCache(DiskStorage(path)) as cache:
            await cache.store(user, CacheKey.verbatim("user-1"))
            user = await cache.object(CacheKey.verbatim("user-1"), User)
    """

    def __init__(
        self,
        storage: StorageEngine,
        codec: ObjectCodec | None = None,
        name: str | None = None,
    ) -> None:
        """Initialize the cache.

        Args:
            storage: Engine the cache exclusively owns.
            codec: Value codec. Defaults to the JSON codec.
            name: Identifier used in log records. Defaults to the engine's.
        """
        self.storage = storage
        self.codec = codec or ObjectCodec()
        self.name = name or storage.describe()
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> ObjectCache:
        """Build a cache from settings, configuring logging along the way.

        Args:
            settings: Settings to use. Loaded from the environment if None.

        Returns:
            An ObjectCache whose engine still needs ``init()``.
        """
        settings = settings or get_settings()
        setup_logging(log_level=settings.LOG_LEVEL, log_file=settings.LOG_FILE)

        storage = create_storage(
            settings.STORAGE_BACKEND,
            settings.CACHE_DIR,
            sqlite_path=settings.sqlite_path,
        )
        return cls(storage)

    @asynccontextmanager
    async def _turn(self, operation: str) -> AsyncIterator[None]:
        """Wait for exclusive use of the cache, then run with log context."""
        async with self._lock:
            with log_context(cache=self.name, operation=operation):
                yield

    # Lifecycle

    async def init(self) -> None:
        """Initialize the underlying storage engine."""
        async with self._turn("init"):
            await self.storage.init()

    async def close(self) -> None:
        """Close the underlying storage engine."""
        async with self._turn("close"):
            await self.storage.close()

    async def __aenter__(self) -> ObjectCache:
        await self.init()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # Writes

    async def store(self, obj: Any, key: CacheKey) -> None:
        """Encode ``obj`` and write it under ``key``.

        Raises:
            EncodingError: If ``obj`` cannot be serialized. Nothing is written.
            StorageError: If the engine write fails.
        """
        async with self._turn("store"):
            data = self._encode(obj, key)
            await self.storage.write(data, key)
            logger.debug("Stored object", key=key.value, size=len(data))

    async def store_batch(self, pairs: Sequence[tuple[CacheKey, Any]]) -> None:
        """Encode every pair up front, then write them in one engine call.

        Raises:
            EncodingError: If any value cannot be serialized. Nothing is written.
            StorageError: If the engine write fails. Some records may be written.
        """
        async with self._turn("store_batch"):
            encoded = [(key, self._encode(obj, key)) for key, obj in pairs]
            await self.storage.write_many(encoded)
            logger.debug("Stored objects", count=len(encoded))

    def _encode(self, obj: Any, key: CacheKey) -> bytes:
        try:
            return self.codec.encode(obj)
        except EncodingError as e:
            e.context.setdefault("key", key.value)
            raise

    # Reads

    async def object(self, key: CacheKey, as_type: type[T]) -> T | None:
        """Read the value for ``key`` as ``as_type``.

        Returns:
            The decoded value, or None if the key is absent or its record
            does not decode into ``as_type``.
        """
        async with self._turn("object"):
            data = await self.storage.read(key)
            if data is None:
                return None
            try:
                return self.codec.decode(data, as_type)
            except DecodingError as e:
                logger.debug("Record did not decode", key=key.value, error=str(e))
                return None

    async def objects(self, keys: Sequence[CacheKey], as_type: type[T]) -> list[T]:
        """Read the values for ``keys`` as ``as_type``.

        Returns:
            Decoded values for the keys that exist, in key order. Empty if
            any record fails to decode.
        """
        async with self._turn("objects"):
            return await self._objects(keys, as_type)

    async def objects_and_keys(
        self, keys: Sequence[CacheKey], as_type: type[T]
    ) -> list[tuple[CacheKey, T]]:
        """Read the values for ``keys`` paired with their keys.

        Returns:
            ``(key, value)`` pairs, or an empty list whenever the values cannot
            be matched one-to-one with ``keys``.
        """
        async with self._turn("objects_and_keys"):
            return await self._objects_and_keys(keys, as_type)

    async def all_objects(self, as_type: type[T]) -> list[T]:
        """Read every stored value as ``as_type`` (all-or-nothing)."""
        async with self._turn("all_objects"):
            keys = await self.storage.all_keys()
            return await self._objects(keys, as_type)

    async def all_objects_and_keys(self, as_type: type[T]) -> list[tuple[CacheKey, T]]:
        """Read every stored value paired with its key (all-or-nothing)."""
        async with self._turn("all_objects_and_keys"):
            keys = await self.storage.all_keys()
            return await self._objects_and_keys(keys, as_type)

    async def _objects(self, keys: Sequence[CacheKey], as_type: type[T]) -> list[T]:
        items = await self.storage.read_many(keys)
        try:
            return [self.codec.decode(data, as_type) for data in items]
        except DecodingError as e:
            logger.debug("Batch read discarded", requested=len(keys), error=str(e))
            return []

    async def _objects_and_keys(
        self, keys: Sequence[CacheKey], as_type: type[T]
    ) -> list[tuple[CacheKey, T]]:
        values = await self._objects(keys, as_type)
        if len(values) != len(keys):
            if values:
                logger.warning(
                    "Values do not line up with keys, discarding batch",
                    keys=len(keys),
                    values=len(values),
                )
            return []
        return list(zip(keys, values))

    # Removal

    async def remove_object(self, key: CacheKey) -> None:
        """Delete the record for ``key``.

        Raises:
            StorageError: If the engine refuses, including for a missing key
                when the engine treats that as an error.
        """
        async with self._turn("remove_object"):
            await self.storage.remove(key)
            logger.debug("Removed object", key=key.value)

    async def remove_objects(self, keys: Sequence[CacheKey]) -> None:
        """Delete records one by one, stopping at the first failure.

        Keys after the failing one are left untouched and nothing is rolled back.
        """
        async with self._turn("remove_objects"):
            for key in keys:
                await self.storage.remove(key)
            logger.debug("Removed objects", count=len(keys))

    async def remove_all_objects(self) -> None:
        """Delete every record."""
        async with self._turn("remove_all_objects"):
            await self.storage.remove_all()
            logger.debug("Removed all objects")

    # Enumeration and metadata

    async def key_count(self) -> int:
        async with self._turn("key_count"):
            return await self.storage.key_count()

    async def all_keys(self) -> list[CacheKey]:
        async with self._turn("all_keys"):
            return await self.storage.all_keys()

    async def creation_date(self, key: CacheKey) -> datetime | None:
        async with self._turn("creation_date"):
            return await self.storage.created_at(key)

    async def last_accessed(self, key: CacheKey) -> datetime | None:
        async with self._turn("last_accessed"):
            return await self.storage.last_accessed(key)

    async def last_modified(self, key: CacheKey) -> datetime | None:
        async with self._turn("last_modified"):
            return await self.storage.last_modified(key)
