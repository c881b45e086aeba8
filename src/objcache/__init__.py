"""
objcache: a concurrency-safe, typed object cache over byte storage engines.
"""

from objcache.cache import (
    DiskStorage,
    MemoryStorage,
    ObjectCache,
    ObjectCodec,
    SQLiteStorage,
    StorageEngine,
    create_storage,
)
from objcache.exceptions import (
    ConfigurationError,
    DecodingError,
    EncodingError,
    InvalidKeyError,
    ObjCacheError,
    RecordNotFoundError,
    StorageError,
)
from objcache.types import CacheKey

__version__ = "0.1.0"

__all__ = [
    "CacheKey",
    "ConfigurationError",
    "DecodingError",
    "DiskStorage",
    "EncodingError",
    "InvalidKeyError",
    "MemoryStorage",
    "ObjCacheError",
    "ObjectCache",
    "ObjectCodec",
    "RecordNotFoundError",
    "SQLiteStorage",
    "StorageEngine",
    "StorageError",
    "create_storage",
]
