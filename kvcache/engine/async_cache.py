"""
AsyncKVCache - asyncio facade over KVCache.
"""

import asyncio
import functools
import os
from typing import Any, Callable

from kvcache.engine.cache import KVCache
from kvcache.models.stat import Stat


class AsyncKVCache:
    """
    Runs KVCache operations in the default thread pool executor so file
    I/O does not block the event loop.

    The wrapped cache still serializes every operation on its own lock.
    """

    def __init__(self, cache: KVCache) -> None:
        self._cache = cache

    @classmethod
    async def open(
        cls,
        folder: str | os.PathLike,
        version: str | bytes,
        sync: bool = False,
    ) -> "AsyncKVCache":
        """
        Async factory method to open the cache.

        Args:
            folder: Directory holding the cache files; created if absent.
            version: Version of the cached data.
            sync: If True, fsync both files after every put and clear.

        Returns:
            Ready AsyncKVCache instance.
        """
        loop = asyncio.get_running_loop()
        cache = await loop.run_in_executor(
            None, functools.partial(KVCache.open, folder, version, sync=sync)
        )
        return cls(cache)

    async def _run(self, func: Callable[..., Any], *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    @property
    def cache(self) -> KVCache:
        """The underlying synchronous cache."""
        return self._cache

    @property
    def folder(self) -> str:
        return self._cache.folder

    async def get(self, key: str | bytes) -> bytes | None:
        return await self._run(self._cache.get, key)

    async def put(self, key: str | bytes, value: bytes) -> None:
        await self._run(self._cache.put, key, value)

    async def clear(self) -> None:
        await self._run(self._cache.clear)

    async def stat(self) -> Stat:
        return await self._run(self._cache.stat)

    def __len__(self) -> int:
        return len(self._cache)

    async def close(self) -> None:
        await self._run(self._cache.close)

    async def __aenter__(self) -> "AsyncKVCache":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
