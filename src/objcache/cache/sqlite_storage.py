"""
SQLite storage engine.

Keeps every record as a BLOB row with ISO-8601 timestamps in a single
table. Overwriting a key keeps its creation time; reads refresh the access
time the way a filesystem would.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

import aiosqlite

from objcache.cache.base import StorageEngine
from objcache.exceptions import RecordNotFoundError, StorageError
from objcache.logging import get_logger
from objcache.types import CacheKey, utc_now

logger = get_logger(__name__)

_UPSERT = """
    INSERT INTO records (key, data, created_at, accessed_at, modified_at)
    VALUES (?, ?, ?, ?, ?)
    ON CONFLICT(key) DO UPDATE SET
        data = excluded.data,
        accessed_at = excluded.accessed_at,
        modified_at = excluded.modified_at
"""


class SQLiteStorage(StorageEngine):
    """Storage engine backed by one SQLite database file.

    Must be initialized with ``init()`` before use.
    """

    def __init__(self, db_path: str | Path) -> None:
        """Initialize SQLite storage.

        Args:
            db_path: Path to the database file. Parent directories are created.
        """
        self.db_path = Path(db_path)
        self._db: aiosqlite.Connection | None = None

    def describe(self) -> str:
        return f"SQLiteStorage({self.db_path})"

    async def init(self) -> None:
        """Open the database and create the schema."""
        if self._db is not None:
            return

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._db = await aiosqlite.connect(self.db_path)
            self._db.row_factory = aiosqlite.Row

            await self._db.execute("""
                CREATE TABLE IF NOT EXISTS records (
                    key TEXT PRIMARY KEY,
                    data BLOB NOT NULL,
                    created_at TEXT NOT NULL,
                    accessed_at TEXT NOT NULL,
                    modified_at TEXT NOT NULL
                )
            """)
            await self._db.commit()
        except (aiosqlite.Error, OSError) as e:
            raise self._error("Failed to open database", "init", None, e) from e

        logger.info("SQLite storage initialized", db_path=str(self.db_path))

    async def close(self) -> None:
        """Close the database connection."""
        if self._db:
            await self._db.close()
            self._db = None

    def _conn(self) -> aiosqlite.Connection:
        if not self._db:
            raise StorageError(
                "SQLiteStorage not initialized. Call init() first.",
                context={"engine": self.describe()},
            )
        return self._db

    def _error(
        self,
        message: str,
        operation: str,
        key: CacheKey | None,
        cause: Exception,
    ) -> StorageError:
        context: dict[str, str] = {"engine": self.describe(), "operation": operation}
        if key is not None:
            context["key"] = key.value
        return StorageError(f"{message}: {cause}", context=context)

    async def write(self, data: bytes, key: CacheKey) -> None:
        db = self._conn()
        now = utc_now().isoformat()
        try:
            await db.execute(_UPSERT, (key.value, data, now, now, now))
            await db.commit()
        except aiosqlite.Error as e:
            await db.rollback()
            raise self._error("Failed to write record", "write", key, e) from e
        logger.debug("Wrote record", key=key.value, size=len(data))

    async def write_many(self, items: Sequence[tuple[CacheKey, bytes]]) -> None:
        db = self._conn()
        now = utc_now().isoformat()
        try:
            await db.executemany(
                _UPSERT, [(key.value, data, now, now, now) for key, data in items]
            )
            await db.commit()
        except aiosqlite.Error as e:
            await db.rollback()
            raise self._error("Failed to write records", "write_many", None, e) from e
        logger.debug("Wrote records", count=len(items))

    async def read(self, key: CacheKey) -> bytes | None:
        db = self._conn()
        try:
            async with db.execute(
                "SELECT data FROM records WHERE key = ?", (key.value,)
            ) as cursor:
                row = await cursor.fetchone()
            if row is None:
                return None
            await db.execute(
                "UPDATE records SET accessed_at = ? WHERE key = ?",
                (utc_now().isoformat(), key.value),
            )
            await db.commit()
        except aiosqlite.Error as e:
            raise self._error("Failed to read record", "read", key, e) from e
        return bytes(row["data"])

    async def read_many(self, keys: Sequence[CacheKey]) -> list[bytes]:
        results: list[bytes] = []
        for key in keys:
            data = await self.read(key)
            if data is not None:
                results.append(data)
        return results

    async def remove(self, key: CacheKey) -> None:
        db = self._conn()
        try:
            cursor = await db.execute("DELETE FROM records WHERE key = ?", (key.value,))
            deleted = cursor.rowcount
            await db.commit()
        except aiosqlite.Error as e:
            raise self._error("Failed to remove record", "remove", key, e) from e

        if deleted == 0:
            raise RecordNotFoundError(
                "No record to remove",
                context={"engine": self.describe(), "key": key.value},
            )
        logger.debug("Removed record", key=key.value)

    async def remove_all(self) -> None:
        db = self._conn()
        try:
            cursor = await db.execute("DELETE FROM records")
            removed = cursor.rowcount
            await db.commit()
        except aiosqlite.Error as e:
            raise self._error("Failed to remove records", "remove_all", None, e) from e
        logger.debug("Removed all records", removed=removed)

    async def all_keys(self) -> list[CacheKey]:
        db = self._conn()
        try:
            async with db.execute("SELECT key FROM records ORDER BY key") as cursor:
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise self._error("Failed to list records", "all_keys", None, e) from e
        return [CacheKey.verbatim(row["key"]) for row in rows]

    async def key_count(self) -> int:
        db = self._conn()
        try:
            async with db.execute("SELECT COUNT(*) FROM records") as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise self._error("Failed to count records", "key_count", None, e) from e
        return row[0] if row else 0

    async def _timestamp(self, column: str, key: CacheKey) -> datetime | None:
        db = self._conn()
        try:
            async with db.execute(
                f"SELECT {column} FROM records WHERE key = ?", (key.value,)
            ) as cursor:
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise self._error("Failed to read metadata", column, key, e) from e
        return datetime.fromisoformat(row[column]) if row else None

    async def created_at(self, key: CacheKey) -> datetime | None:
        return await self._timestamp("created_at", key)

    async def last_accessed(self, key: CacheKey) -> datetime | None:
        return await self._timestamp("accessed_at", key)

    async def last_modified(self, key: CacheKey) -> datetime | None:
        return await self._timestamp("modified_at", key)
