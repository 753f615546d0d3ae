"""
Redis DNS entry store implementation
Suitable for sharing resolved entries across processes/servers
"""
import json
import logging
from typing import Any, AsyncIterator, Optional, Protocol

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ..errors import BackendError
from ..types import DnsEntry, DnsEntryStore, RedisConfig

logger = logging.getLogger(__name__)


class RedisClientProtocol(Protocol):
    """Protocol for Redis client (compatible with redis-py async)"""

    async def get(self, name: str) -> Any:
        ...

    async def set(self, name: str, value: str, px: Optional[int] = None) -> Any:
        ...

    async def exists(self, *names: str) -> int:
        ...

    async def delete(self, *names: str) -> int:
        ...

    def scan_iter(self, match: Optional[str] = None) -> AsyncIterator[Any]:
        ...

    async def aclose(self) -> None:
        ...


class RedisStore(DnsEntryStore):
    """
    Redis implementation of DnsEntryStore.

    Entries are JSON blobs under key_prefix + host with a server-side
    expiry, so purge_stale() has nothing to do. entries(), size() and
    clear() walk the key space with SCAN; keys added or removed during a
    walk may or may not be seen.
    """

    def __init__(
        self,
        client: RedisClientProtocol,
        ttl_seconds: float,
        key_prefix: str = "dnscache:",
    ) -> None:
        """
        Create a new RedisStore.

        Args:
            client: Redis client (async redis-py instance, decode_responses=True)
            ttl_seconds: Server-side expiry applied on every set
            key_prefix: Prefix for all keys. Default: 'dnscache:'
        """
        self._client = client
        self._ttl_ms = max(1, int(ttl_seconds * 1000))
        self._key_prefix = key_prefix

    def _get_key(self, host: str) -> str:
        """Get the full key with prefix"""
        return f"{self._key_prefix}{host}"

    async def _scan_keys(self) -> list[str]:
        return [key async for key in self._client.scan_iter(match=f"{self._key_prefix}*")]

    def _decode(self, raw: Any) -> Optional[DnsEntry]:
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            return DnsEntry.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Discarding undecodable cache entry: {e}")
            return None

    async def get(self, host: str) -> Optional[DnsEntry]:
        """Get an entry"""
        try:
            raw = await self._client.get(self._get_key(host))
        except RedisError as e:
            raise BackendError(f"Redis get failed for {host}: {e}") from e
        return self._decode(raw)

    async def set(self, host: str, entry: DnsEntry) -> bool:
        """
        Write an entry with a fresh server-side expiry.
        Uses EXISTS + SET in sequence (not atomic; is_new is advisory only)
        """
        key = self._get_key(host)
        try:
            is_new = not await self._client.exists(key)
            await self._client.set(key, json.dumps(entry.to_dict()), px=self._ttl_ms)
        except RedisError as e:
            raise BackendError(f"Redis set failed for {host}: {e}") from e
        return is_new

    async def entries(self) -> list[DnsEntry]:
        """Best-effort snapshot: list keys, then fetch each value"""
        try:
            keys = await self._scan_keys()
            result = []
            for key in keys:
                entry = self._decode(await self._client.get(key))
                if entry is not None:
                    result.append(entry)
            return result
        except RedisError as e:
            raise BackendError(f"Redis scan failed: {e}") from e

    async def purge_stale(self) -> int:
        """Redis expires keys itself"""
        return 0

    async def delete(self, host: str) -> bool:
        """Delete an entry"""
        try:
            return bool(await self._client.delete(self._get_key(host)))
        except RedisError as e:
            raise BackendError(f"Redis delete failed for {host}: {e}") from e

    async def clear(self) -> None:
        """Delete every key under the prefix"""
        try:
            keys = await self._scan_keys()
            if keys:
                await self._client.delete(*keys)
        except RedisError as e:
            raise BackendError(f"Redis clear failed: {e}") from e

    async def size(self) -> int:
        """Number of keys under the prefix"""
        try:
            return len(await self._scan_keys())
        except RedisError as e:
            raise BackendError(f"Redis scan failed: {e}") from e

    async def close(self) -> None:
        """Close the store and cleanup resources"""
        await self._client.aclose()


def create_redis_store(config: RedisConfig, ttl_seconds: float) -> RedisStore:
    """
    Create a RedisStore connected to config.url.

    Args:
        config: Redis connection settings
        ttl_seconds: Server-side expiry for entries

    Returns:
        RedisStore instance
    """
    client = Redis.from_url(
        config.url,
        password=config.password,
        decode_responses=True,
    )
    return RedisStore(client, ttl_seconds, config.key_prefix)
