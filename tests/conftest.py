"""
Pytest configuration and fixtures for object cache tests.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import AsyncGenerator, Generator
from unittest.mock import patch

import pytest

from objcache.cache.memory_storage import MemoryStorage
from objcache.cache.object_cache import ObjectCache
from objcache.config import Settings, clear_settings_cache


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test outputs."""
    return tmp_path


@pytest.fixture
def memory_storage() -> MemoryStorage:
    """Provide an empty in-memory engine."""
    return MemoryStorage()


@pytest.fixture
async def cache(memory_storage: MemoryStorage) -> AsyncGenerator[ObjectCache, None]:
    """Provide an initialized cache over the in-memory engine."""
    async with ObjectCache(memory_storage, name="test") as object_cache:
        yield object_cache


@pytest.fixture
def mock_env_vars() -> Generator[dict[str, str], None, None]:
    """Provide mock environment variables for testing."""
    env_vars = {
        "CACHE_DIR": ".test_cache",
        "STORAGE_BACKEND": "sqlite",
        "SQLITE_FILENAME": "test.db",
        "LOG_LEVEL": "DEBUG",
    }

    with patch.dict(os.environ, env_vars, clear=False):
        clear_settings_cache()
        yield env_vars


@pytest.fixture
def mock_settings(mock_env_vars: dict[str, str], temp_dir: Path) -> Generator[Settings, None, None]:
    """Provide a Settings instance rooted in temp_dir."""
    with patch.dict(os.environ, {"CACHE_DIR": str(temp_dir / "cache")}):
        clear_settings_cache()
        from objcache.config import get_settings

        settings = get_settings()
        settings.ensure_directories()
        yield settings
        clear_settings_cache()


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Automatically reset settings cache before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
