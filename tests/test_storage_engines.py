"""
Behavioral checks shared by every storage engine.
"""

from __future__ import annotations

from pathlib import Path
from typing import AsyncGenerator

import pytest

from objcache.cache.base import StorageEngine
from objcache.cache.disk_storage import DiskStorage
from objcache.cache.memory_storage import MemoryStorage
from objcache.cache.sqlite_storage import SQLiteStorage
from objcache.exceptions import RecordNotFoundError
from objcache.types import CacheKey

A = CacheKey.verbatim("alpha")
B = CacheKey.verbatim("beta")
C = CacheKey.verbatim("gamma")


@pytest.fixture(params=["disk", "sqlite", "memory"])
async def engine(request: pytest.FixtureRequest, temp_dir: Path) -> AsyncGenerator[StorageEngine, None]:
    """Create an initialized engine of each kind."""
    if request.param == "disk":
        storage: StorageEngine = DiskStorage(temp_dir / "records")
    elif request.param == "sqlite":
        storage = SQLiteStorage(temp_dir / "records.db")
    else:
        storage = MemoryStorage()
    await storage.init()
    yield storage
    await storage.close()


class TestReadWrite:
    """Test byte-level reads and writes."""

    @pytest.mark.asyncio
    async def test_write_then_read(self, engine: StorageEngine) -> None:
        """Test that written bytes read back unchanged."""
        await engine.write(b"\x00\x01payload", A)
        assert await engine.read(A) == b"\x00\x01payload"

    @pytest.mark.asyncio
    async def test_read_missing_is_none(self, engine: StorageEngine) -> None:
        """Test that reading an unknown key returns None."""
        assert await engine.read(A) is None

    @pytest.mark.asyncio
    async def test_overwrite(self, engine: StorageEngine) -> None:
        """Test that a second write replaces the first."""
        await engine.write(b"one", A)
        await engine.write(b"two", A)

        assert await engine.read(A) == b"two"
        assert await engine.key_count() == 1

    @pytest.mark.asyncio
    async def test_read_many_keeps_order_and_omits_missing(
        self, engine: StorageEngine
    ) -> None:
        """Test batched reads."""
        await engine.write_many([(A, b"a"), (C, b"c")])

        assert await engine.read_many([C, B, A]) == [b"c", b"a"]


class TestRemoval:
    """Test record removal."""

    @pytest.mark.asyncio
    async def test_remove(self, engine: StorageEngine) -> None:
        """Test that a removed key is gone."""
        await engine.write(b"a", A)
        await engine.remove(A)

        assert await engine.read(A) is None
        assert await engine.all_keys() == []

    @pytest.mark.asyncio
    async def test_remove_missing_raises(self, engine: StorageEngine) -> None:
        """Test that removing an unknown key raises RecordNotFoundError."""
        with pytest.raises(RecordNotFoundError):
            await engine.remove(A)

    @pytest.mark.asyncio
    async def test_remove_all(self, engine: StorageEngine) -> None:
        """Test that remove_all empties the engine and can be repeated."""
        await engine.write_many([(A, b"a"), (B, b"b")])

        await engine.remove_all()
        await engine.remove_all()

        assert await engine.all_keys() == []
        assert await engine.key_count() == 0


class TestEnumerationAndMetadata:
    """Test key listing and timestamps."""

    @pytest.mark.asyncio
    async def test_all_keys(self, engine: StorageEngine) -> None:
        """Test that every written key is listed once."""
        await engine.write_many([(B, b"b"), (A, b"a"), (C, b"c")])

        keys = await engine.all_keys()

        assert sorted(k.value for k in keys) == ["alpha", "beta", "gamma"]
        assert await engine.key_count() == 3

    @pytest.mark.asyncio
    async def test_timestamps(self, engine: StorageEngine) -> None:
        """Test that stored keys have aware timestamps and missing ones do not."""
        await engine.write(b"a", A)

        for lookup in (engine.created_at, engine.last_accessed, engine.last_modified):
            stamp = await lookup(A)
            assert stamp is not None
            assert stamp.tzinfo is not None
            assert await lookup(B) is None

    @pytest.mark.asyncio
    async def test_hashed_keys_are_addressable(self, engine: StorageEngine) -> None:
        """Test that SHA-256 keys work on every engine."""
        key = CacheKey.hashed("https://example.com/a?b=c")

        await engine.write(b"url", key)

        assert await engine.read(key) == b"url"
        assert key in await engine.all_keys()
