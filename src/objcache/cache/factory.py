"""Storage engine construction from a backend name."""

from __future__ import annotations

from pathlib import Path

from objcache.cache.base import StorageEngine
from objcache.cache.disk_storage import DiskStorage
from objcache.cache.memory_storage import MemoryStorage
from objcache.cache.sqlite_storage import SQLiteStorage
from objcache.exceptions import ConfigurationError

BACKENDS = ("disk", "sqlite", "memory")


def create_storage(
    backend: str,
    directory: str | Path,
    sqlite_path: str | Path | None = None,
) -> StorageEngine:
    """Create the storage engine for ``backend``.

    Args:
        backend: One of "disk", "sqlite" or "memory".
        directory: Root directory for persistent engines.
        sqlite_path: Database file for the sqlite engine. Defaults to
            ``objects.db`` inside ``directory``.

    Returns:
        An uninitialized StorageEngine.

    Raises:
        ConfigurationError: If the backend name is unknown.
    """
    name = backend.strip().lower()
    if name == "disk":
        return DiskStorage(directory)
    if name == "sqlite":
        return SQLiteStorage(sqlite_path or Path(directory) / "objects.db")
    if name == "memory":
        return MemoryStorage()
    raise ConfigurationError(
        f"Unknown storage backend: {backend!r}",
        context={"available": list(BACKENDS)},
    )
