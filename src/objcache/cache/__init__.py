"""
Cache package: the typed object cache and its storage engines.

- ObjectCache (object_cache.py): serialized, typed facade over an engine
- ObjectCodec (codec.py): orjson + pydantic value codec
- StorageEngine (base.py): byte-level engine interface
- DiskStorage, SQLiteStorage, MemoryStorage: shipped engines
"""

from objcache.cache.base import StorageEngine
from objcache.cache.codec import ObjectCodec
from objcache.cache.disk_storage import DiskStorage
from objcache.cache.factory import create_storage
from objcache.cache.memory_storage import MemoryStorage
from objcache.cache.object_cache import ObjectCache
from objcache.cache.sqlite_storage import SQLiteStorage

__all__ = [
    "DiskStorage",
    "MemoryStorage",
    "ObjectCache",
    "ObjectCodec",
    "SQLiteStorage",
    "StorageEngine",
    "create_storage",
]
