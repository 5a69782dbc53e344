from kvcache.engine.async_cache import AsyncKVCache
from kvcache.engine.cache import KVCache

__all__ = ["KVCache", "AsyncKVCache"]
