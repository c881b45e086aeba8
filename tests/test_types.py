"""
Tests for cache keys and the error hierarchy.
"""

from __future__ import annotations

import hashlib

import pytest

from objcache.exceptions import (
    EncodingError,
    InvalidKeyError,
    ObjCacheError,
    RecordNotFoundError,
    StorageError,
)
from objcache.types import CacheKey


class TestCacheKey:
    """Tests for CacheKey construction and identity."""

    def test_hashed_uses_sha256_hex(self) -> None:
        """Test that hashed keys are the SHA-256 digest of the input."""
        key = CacheKey.hashed("https://example.com/image.png")

        assert key.value == hashlib.sha256(b"https://example.com/image.png").hexdigest()
        assert len(key.value) == 64

    def test_hashed_is_deterministic(self) -> None:
        assert CacheKey.hashed("a") == CacheKey.hashed("a")
        assert CacheKey.hashed("a") != CacheKey.hashed("b")

    def test_verbatim_keeps_value(self) -> None:
        """Test that verbatim keys equal keys built from the same string."""
        assert CacheKey.verbatim("user-1") == CacheKey("user-1")
        assert str(CacheKey.verbatim("user-1")) == "user-1"

    def test_keys_are_hashable(self) -> None:
        """Test that equal keys collapse in sets and dicts."""
        keys = {CacheKey("a"), CacheKey.verbatim("a"), CacheKey("b")}
        assert len(keys) == 2

    def test_empty_key_rejected(self) -> None:
        with pytest.raises(ValueError):
            CacheKey.verbatim("")

    def test_keys_are_immutable(self) -> None:
        key = CacheKey("a")
        with pytest.raises(AttributeError):
            key.value = "b"  # type: ignore[misc]


class TestErrors:
    """Tests for the exception hierarchy."""

    def test_storage_errors_share_a_base(self) -> None:
        assert issubclass(RecordNotFoundError, StorageError)
        assert issubclass(InvalidKeyError, StorageError)
        assert issubclass(StorageError, ObjCacheError)
        assert issubclass(EncodingError, ObjCacheError)

    def test_context_rendered_in_str(self) -> None:
        """Test that context fields appear in the message."""
        error = StorageError("Failed to write record", context={"key": "k1"})

        assert str(error) == "Failed to write record (key='k1')"
        assert repr(error) == "StorageError('Failed to write record', context={'key': 'k1'})"

    def test_str_without_context(self) -> None:
        assert str(ObjCacheError("plain")) == "plain"
