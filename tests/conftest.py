"""
Shared pytest fixtures for cache store tests.
"""

import os
import tempfile

import pytest

from kvcache.engine.cache import KVCache


@pytest.fixture
def temp_dir():
    """Provide a temporary directory that is cleaned up after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def cache_folder(temp_dir):
    """Provide a not-yet-existing folder for a cache."""
    return os.path.join(temp_dir, "cache")


@pytest.fixture
def cache(cache_folder):
    """Provide an open KVCache with version v1.0."""
    with KVCache.open(cache_folder, "v1.0") as c:
        yield c


@pytest.fixture
def sample_entries():
    """Provide sample key-value entries for testing."""
    return [
        (b"key1", b"value1"),
        (b"key2", b"value2"),
        (b"key3", b"value3"),
    ]
