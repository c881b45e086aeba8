"""
Custom exception hierarchy for the object cache.

All exceptions inherit from ObjCacheError, which provides optional context
for structured error handling and logging.
"""

from __future__ import annotations

from typing import Any


class ObjCacheError(Exception):
    """Base exception for all object cache errors.

    Attributes:
        message: Human-readable error message.
        context: Optional structured context for logging/debugging.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class ConfigurationError(ObjCacheError):
    """Raised when configuration is invalid or missing.

    Examples:
        - Unknown storage backend name
        - SQLite filename containing a path separator
    """

    pass


class EncodingError(ObjCacheError):
    """Raised when a value cannot be serialized.

    Raised before any storage I/O is attempted, so stored state never changes.

    Context should include:
        - type: The type name of the value that failed to encode
        - key: The cache key, when known
    """

    pass


class DecodingError(ObjCacheError):
    """Raised when stored bytes cannot be decoded into the requested type.

    Never escapes a public ObjectCache read: a failed single read is
    reported as no value, a failed batch read as an empty list.

    Context should include:
        - as_type: The requested decode target
    """

    pass


class StorageError(ObjCacheError):
    """Raised when a storage engine primitive fails.

    Context should include:
        - engine: The engine class name
        - key: The cache key, when the operation addressed one
        - operation: The primitive that failed (write, read, remove, ...)
    """

    pass


class RecordNotFoundError(StorageError):
    """Raised when removing a key that has no stored record."""

    pass


class InvalidKeyError(StorageError):
    """Raised when an engine cannot address a key.

    Examples:
        - A verbatim key containing a path separator on the disk engine
    """

    pass
