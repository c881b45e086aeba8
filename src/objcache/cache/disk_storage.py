"""
File-system storage engine.

Stores one file per key directly inside a single directory, using the key
value as the file name. Writes land in a hidden temporary file in the same
directory and are moved into place with os.replace, so a reader sees either
the old record or the new one, never a partial file.

Blocking file operations run in worker threads via asyncio.to_thread.
"""

from __future__ import annotations

import asyncio
import os
import tempfile
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from objcache.cache.base import StorageEngine
from objcache.exceptions import InvalidKeyError, RecordNotFoundError, StorageError
from objcache.logging import get_logger
from objcache.types import CacheKey, utc_from_timestamp

logger = get_logger(__name__)

TEMP_PREFIX = "."
TEMP_SUFFIX = ".tmp"


class DiskStorage(StorageEngine):
    """Storage engine backed by files in one directory.

    Hidden files (leading dot) are never treated as records, which keeps
    in-flight temporary files out of enumeration.
    """

    def __init__(self, directory: str | Path) -> None:
        """Initialize disk storage.

        Args:
            directory: Folder the records are written to. Created on demand.
        """
        self.directory = Path(directory)

    def describe(self) -> str:
        return f"DiskStorage({self.directory})"

    async def init(self) -> None:
        try:
            await asyncio.to_thread(self.directory.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise self._error("Failed to create storage directory", "init", None, e) from e
        logger.info("Disk storage initialized", directory=str(self.directory))

    def _path_for(self, key: CacheKey) -> Path:
        """Map a key to its record file, rejecting keys that are not plain file names."""
        name = key.value
        if (
            "/" in name
            or "\\" in name
            or "\x00" in name
            or name.startswith(TEMP_PREFIX)
        ):
            raise InvalidKeyError(
                "Key cannot be used as a file name",
                context={"engine": self.describe(), "key": name},
            )
        return self.directory / name

    def _error(
        self, message: str, operation: str, key: CacheKey | None, cause: OSError
    ) -> StorageError:
        context: dict[str, str] = {"engine": self.describe(), "operation": operation}
        if key is not None:
            context["key"] = key.value
        return StorageError(f"{message}: {cause}", context=context)

    def _write_file(self, path: Path, data: bytes) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(
            dir=self.directory, prefix=TEMP_PREFIX, suffix=TEMP_SUFFIX
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(temp_name, path)
        except BaseException:
            try:
                os.unlink(temp_name)
            except FileNotFoundError:
                pass
            raise

    async def write(self, data: bytes, key: CacheKey) -> None:
        path = self._path_for(key)
        try:
            await asyncio.to_thread(self._write_file, path, data)
        except OSError as e:
            raise self._error("Failed to write record", "write", key, e) from e
        logger.debug("Wrote record", key=key.value, size=len(data))

    async def write_many(self, items: Sequence[tuple[CacheKey, bytes]]) -> None:
        for key, data in items:
            await self.write(data, key)

    def _read_file(self, path: Path) -> bytes | None:
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    async def read(self, key: CacheKey) -> bytes | None:
        path = self._path_for(key)
        try:
            return await asyncio.to_thread(self._read_file, path)
        except OSError as e:
            raise self._error("Failed to read record", "read", key, e) from e

    async def read_many(self, keys: Sequence[CacheKey]) -> list[bytes]:
        results: list[bytes] = []
        for key in keys:
            data = await self.read(key)
            if data is not None:
                results.append(data)
        return results

    async def remove(self, key: CacheKey) -> None:
        path = self._path_for(key)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            raise RecordNotFoundError(
                "No record to remove",
                context={"engine": self.describe(), "key": key.value},
            ) from None
        except OSError as e:
            raise self._error("Failed to remove record", "remove", key, e) from e
        logger.debug("Removed record", key=key.value)

    def _remove_all_files(self) -> int:
        if not self.directory.exists():
            return 0
        removed = 0
        with os.scandir(self.directory) as entries:
            for entry in entries:
                if entry.is_file(follow_symlinks=False):
                    os.unlink(entry.path)
                    removed += 1
        return removed

    async def remove_all(self) -> None:
        try:
            removed = await asyncio.to_thread(self._remove_all_files)
        except OSError as e:
            raise self._error("Failed to remove records", "remove_all", None, e) from e
        logger.debug("Removed all records", removed=removed)

    def _list_names(self) -> list[str]:
        if not self.directory.exists():
            return []
        with os.scandir(self.directory) as entries:
            names = [
                entry.name
                for entry in entries
                if entry.is_file(follow_symlinks=False)
                and not entry.name.startswith(TEMP_PREFIX)
            ]
        return sorted(names)

    async def all_keys(self) -> list[CacheKey]:
        try:
            names = await asyncio.to_thread(self._list_names)
        except OSError as e:
            raise self._error("Failed to list records", "all_keys", None, e) from e
        return [CacheKey.verbatim(name) for name in names]

    async def _stat(self, key: CacheKey) -> os.stat_result | None:
        path = self._path_for(key)
        try:
            return await asyncio.to_thread(path.stat)
        except FileNotFoundError:
            return None
        except OSError as e:
            raise self._error("Failed to stat record", "stat", key, e) from e

    async def created_at(self, key: CacheKey) -> datetime | None:
        st = await self._stat(key)
        if st is None:
            return None
        # st_birthtime only exists on some platforms; st_ctime is the closest elsewhere
        return utc_from_timestamp(getattr(st, "st_birthtime", st.st_ctime))

    async def last_accessed(self, key: CacheKey) -> datetime | None:
        st = await self._stat(key)
        return utc_from_timestamp(st.st_atime) if st else None

    async def last_modified(self, key: CacheKey) -> datetime | None:
        st = await self._stat(key)
        return utc_from_timestamp(st.st_mtime) if st else None
