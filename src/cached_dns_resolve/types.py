"""
Type definitions for cached_dns_resolve
"""
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional
from abc import ABC, abstractmethod


@dataclass
class DnsEntry:
    """A cached hostname resolution"""

    host: str
    """The hostname this entry resolves"""

    addresses: list[str]
    """Resolved IP addresses, never empty while stored"""

    next_index: int = 0
    """Round-robin cursor, read modulo len(addresses)"""

    last_used_at: float = 0.0
    """When this entry last served an address (Unix timestamp)"""

    updated_at: float = 0.0
    """When addresses were last (re)resolved (Unix timestamp)"""

    def next_address(self) -> str:
        """Select the next address round-robin and advance the cursor"""
        address = self.addresses[self.next_index % len(self.addresses)]
        self.next_index += 1
        return address

    def copy(self) -> "DnsEntry":
        """Detached copy, safe to mutate"""
        return DnsEntry(
            host=self.host,
            addresses=list(self.addresses),
            next_index=self.next_index,
            last_used_at=self.last_used_at,
            updated_at=self.updated_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "host": self.host,
            "addresses": list(self.addresses),
            "next_index": self.next_index,
            "last_used_at": self.last_used_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DnsEntry":
        """
        Rebuild an entry from its to_dict() form.

        Raises:
            ValueError: addresses is missing, not a list, or empty
        """
        addresses = data["addresses"]
        if not isinstance(addresses, list) or not addresses:
            raise ValueError(f"Entry for {data.get('host')!r} has no addresses")
        return cls(
            host=data["host"],
            addresses=[str(address) for address in addresses],
            next_index=int(data.get("next_index", 0)),
            last_used_at=float(data.get("last_used_at", 0.0)),
            updated_at=float(data.get("updated_at", 0.0)),
        )


@dataclass
class DnsCacheStats:
    """Snapshot of the cache statistics"""

    dns_entries: int = 0
    """Live backend size at the time of the snapshot"""

    refreshed: int = 0
    """Entries re-resolved by the background refresher"""

    hits: int = 0
    """Lookups served from cache"""

    misses: int = 0
    """Lookups that required a fresh resolution"""

    idle_expired: int = 0
    """Entries deleted by the refresher for being idle"""

    errors: int = 0
    """Recorded failures (request path and background tasks)"""

    last_error: Optional[BaseException] = None
    """Most recently recorded failure"""

    last_error_at: Optional[float] = None
    """When the last failure was recorded (Unix timestamp)"""


@dataclass
class LoggingConfig:
    """Logger configuration"""

    name: str = "cached_dns_resolve"
    """Logger name. Default: the package logger"""

    level: str = "INFO"
    """Log level name. Default: 'INFO'"""

    pretty: bool = False
    """Render with rich instead of plain text. Default: False"""


@dataclass
class RedisConfig:
    """Redis backend configuration"""

    url: str = "redis://localhost:6379/0"
    """Redis connection URL"""

    password: Optional[str] = None
    """Redis password, if not embedded in the URL"""

    ttl_seconds: Optional[float] = None
    """Server-side TTL. Default: dns_ttl_seconds * cache_grace_expire_multiplier"""

    key_prefix: str = "dnscache:"
    """Prefix for all keys written by the store"""


@dataclass
class DnsCacheConfig:
    """Configuration for the DNS cache resolver"""

    disabled: bool = False
    """Bypass resolution entirely in the HTTP transport. Default: False"""

    dns_ttl_seconds: float = 5.0
    """Age after which an actively used entry is refreshed. Default: 5.0"""

    cache_grace_expire_multiplier: float = 2.0
    """Backend TTL = dns_ttl_seconds * multiplier. Default: 2.0"""

    dns_idle_ttl_seconds: float = 3600.0
    """Unused time after which a stale entry is deleted. Default: 3600.0 (1 hour)"""

    background_scan_seconds: float = 2.4
    """Interval between background refresh scans. Default: 2.4"""

    dns_cache_size: int = 100
    """Maximum entries for the in-memory backend. Default: 100"""

    lookup_timeout_seconds: float = 5.0
    """Lifetime of the primary DNS query. Default: 5.0"""

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    """Logger configuration"""

    redis: Optional[RedisConfig] = None
    """Redis backend configuration. When set, Redis replaces the memory backend"""

    @property
    def backend_ttl_seconds(self) -> float:
        """TTL handed to the backend, leaving the refresher a grace window"""
        return self.dns_ttl_seconds * self.cache_grace_expire_multiplier


# Name resolution strategy: hostname -> addresses
AddressLookup = Callable[[str], Awaitable[list[str]]]


class DnsEntryStore(ABC):
    """State store interface for cached DNS entries"""

    @abstractmethod
    async def get(self, host: str) -> Optional[DnsEntry]:
        """Get a detached copy of the entry, or None if absent or expired"""
        pass

    @abstractmethod
    async def set(self, host: str, entry: DnsEntry) -> bool:
        """Insert or fully replace an entry. Returns True if the key was new"""
        pass

    @abstractmethod
    async def entries(self) -> list[DnsEntry]:
        """Snapshot of all live entries, in no particular order"""
        pass

    @abstractmethod
    async def purge_stale(self) -> int:
        """Physically remove expired entries. Returns the number removed"""
        pass

    @abstractmethod
    async def delete(self, host: str) -> bool:
        """Delete an entry if present"""
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Clear all entries"""
        pass

    @abstractmethod
    async def size(self) -> int:
        """Number of live entries"""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the store connection"""
        pass
