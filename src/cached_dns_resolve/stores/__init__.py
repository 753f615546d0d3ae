"""
DNS entry store implementations
"""
from ..config import store_ttl_seconds
from ..types import DnsCacheConfig, DnsEntryStore
from .memory import MemoryStore, create_memory_store
from .redis import RedisClientProtocol, RedisStore, create_redis_store


def create_store(config: DnsCacheConfig) -> DnsEntryStore:
    """Create the backend selected by the config: Redis when configured, memory otherwise"""
    ttl_seconds = store_ttl_seconds(config)
    if config.redis is not None:
        return create_redis_store(config.redis, ttl_seconds)
    return create_memory_store(config.dns_cache_size, ttl_seconds)


__all__ = [
    "MemoryStore",
    "create_memory_store",
    "RedisClientProtocol",
    "RedisStore",
    "create_redis_store",
    "create_store",
]
