"""
In-memory DNS entry store implementation
"""
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional

from ..types import DnsEntry, DnsEntryStore


@dataclass
class _Slot:
    entry: DnsEntry
    expires_at: float


class MemoryStore(DnsEntryStore):
    """
    Bounded in-memory store with per-entry TTL and LRU eviction.

    Every set() re-arms the entry's TTL. Expired entries are invisible to
    get(), entries() and size() before purge_stale() physically removes them.

    Example:
        store = MemoryStore(max_entries=100, ttl_seconds=10.0)
        await store.set("example.com", entry)
        entry = await store.get("example.com")
    """

    def __init__(self, max_entries: int = 100, ttl_seconds: float = 10.0) -> None:
        self._cache: OrderedDict[str, _Slot] = OrderedDict()
        self._max_entries = max_entries
        self._ttl_seconds = ttl_seconds

    @property
    def max_entries(self) -> int:
        return self._max_entries

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def _live_slot(self, host: str, now: float) -> Optional[_Slot]:
        slot = self._cache.get(host)
        if slot is None:
            return None
        if now >= slot.expires_at:
            del self._cache[host]
            return None
        return slot

    async def get(self, host: str) -> Optional[DnsEntry]:
        """Get a detached copy of a live entry"""
        slot = self._live_slot(host, time.time())
        if slot is None:
            return None
        self._cache.move_to_end(host)
        return slot.entry.copy()

    async def set(self, host: str, entry: DnsEntry) -> bool:
        """Insert or replace an entry, evicting the least recently used on overflow"""
        now = time.time()
        is_new = self._live_slot(host, now) is None

        self._cache[host] = _Slot(entry=entry.copy(), expires_at=now + self._ttl_seconds)
        self._cache.move_to_end(host)

        while len(self._cache) > self._max_entries:
            self._cache.popitem(last=False)

        return is_new

    async def entries(self) -> list[DnsEntry]:
        """Copies of all live entries"""
        now = time.time()
        return [
            slot.entry.copy()
            for slot in self._cache.values()
            if now < slot.expires_at
        ]

    async def purge_stale(self) -> int:
        """Remove all expired entries"""
        now = time.time()
        expired = [host for host, slot in self._cache.items() if now >= slot.expires_at]
        for host in expired:
            del self._cache[host]
        return len(expired)

    async def delete(self, host: str) -> bool:
        """Delete an entry"""
        return self._cache.pop(host, None) is not None

    async def clear(self) -> None:
        """Clear all entries"""
        self._cache.clear()

    async def size(self) -> int:
        """Number of live entries"""
        now = time.time()
        return sum(1 for slot in self._cache.values() if now < slot.expires_at)

    async def close(self) -> None:
        """Close the store"""
        self._cache.clear()


def create_memory_store(max_entries: int = 100, ttl_seconds: float = 10.0) -> MemoryStore:
    """Create a memory store instance"""
    return MemoryStore(max_entries, ttl_seconds)
