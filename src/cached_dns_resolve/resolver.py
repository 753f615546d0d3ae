"""
DNS Cache Resolver - Main implementation
"""
import logging
import time
from typing import Optional

from .config import validate_config
from .errors import BackendError, NoAddressError, ResolutionError
from .lookup import NameResolver
from .scheduler import RecurringTask
from .stats import StatsRegistry
from .stores import create_store
from .types import (
    AddressLookup,
    DnsCacheConfig,
    DnsCacheStats,
    DnsEntry,
    DnsEntryStore,
)

logger = logging.getLogger(__name__)


class DnsCacheResolver:
    """
    DNS Cache Resolver

    Serves hostname lookups from a cache and keeps entries fresh in the
    background:
    - Round-robin address selection per hostname
    - Background refresh of stale entries that are still in use
    - Idle expiry of stale entries nobody asks for
    - Periodic purge of backend-expired entries
    - Hit/miss/refresh/error statistics

    Example:
        resolver = DnsCacheResolver(DnsCacheConfig(dns_ttl_seconds=5.0))
        resolver.start()

        address = await resolver.resolve_address('api.example.com')
        stats = await resolver.get_stats()

        await resolver.close()
    """

    def __init__(
        self,
        config: Optional[DnsCacheConfig] = None,
        store: Optional[DnsEntryStore] = None,
        lookup: Optional[AddressLookup] = None,
    ) -> None:
        self._config = validate_config(config or DnsCacheConfig())

        self._store = store or create_store(self._config)
        self._lookup = lookup or NameResolver(self._config.lookup_timeout_seconds).resolve
        self._stats = StatsRegistry()
        self._refreshing = False

        self._refresh_task = RecurringTask(
            "dns-cache-refresh",
            self._config.background_scan_seconds,
            self.background_refresh,
            on_error=lambda e: self.record_error(e, f"Error in background refresh: {e}"),
        )
        self._prune_task = RecurringTask(
            "dns-cache-prune",
            self._config.dns_idle_ttl_seconds,
            self.prune_stale,
            on_error=lambda e: self.record_error(e, f"Error purging stale entries: {e}"),
        )

    @property
    def config(self) -> DnsCacheConfig:
        return self._config

    @property
    def store(self) -> DnsEntryStore:
        return self._store

    @property
    def refreshing(self) -> bool:
        """Whether a background refresh scan is in progress"""
        return self._refreshing

    async def resolve_address(self, host: str) -> str:
        """
        Get an address for a hostname, resolving and caching it on a miss.

        Args:
            host: The hostname to resolve

        Returns:
            One address, chosen round-robin across the host's addresses

        Raises:
            ResolutionError: The hostname could not be resolved
        """
        try:
            entry = await self._store.get(host)
        except BackendError as e:
            self.record_error(e, f"Error reading cache entry for {host}: {e}")
            entry = None

        if entry is not None:
            self._stats.hits += 1
            entry.last_used_at = time.time()
            address = entry.next_address()
            await self._write(entry)
            return address

        self._stats.misses += 1
        logger.debug(f"cache miss {host}")

        addresses = await self._lookup_addresses(host)
        now = time.time()
        entry = DnsEntry(
            host=host,
            addresses=addresses,
            next_index=0,
            last_used_at=now,
            updated_at=now,
        )
        address = entry.next_address()
        await self._write(entry)
        return address

    async def _lookup_addresses(self, host: str) -> list[str]:
        try:
            addresses = await self._lookup(host)
        except ResolutionError:
            raise
        except Exception as e:
            raise ResolutionError(f"Failed to resolve {host}: {e}", host=host) from e

        if not addresses:
            raise NoAddressError(f"No address found for {host}", host=host)
        return list(addresses)

    async def _write(self, entry: DnsEntry) -> None:
        """Write an entry back; a failed write must not fail the lookup"""
        try:
            await self._store.set(entry.host, entry)
        except BackendError as e:
            self.record_error(e, f"Error writing cache entry for {entry.host}: {e}")

    async def background_refresh(self) -> None:
        """
        Run one refresh scan over all cached entries.

        Fresh entries are skipped, stale idle entries are deleted and stale
        entries still in use are re-resolved. A call made while another scan
        is in progress returns immediately.
        """
        if self._refreshing:
            logger.debug("background refresh already in progress, skipping")
            return

        self._refreshing = True
        try:
            try:
                entries = await self._store.entries()
            except BackendError as e:
                self.record_error(e, f"Error listing cache entries: {e}")
                return

            for entry in entries:
                try:
                    await self._refresh_entry(entry)
                except Exception as e:
                    self.record_error(e, f"Error refreshing {entry.host}: {e}")
        finally:
            self._refreshing = False

    async def _refresh_entry(self, entry: DnsEntry) -> None:
        now = time.time()
        if entry.updated_at + self._config.dns_ttl_seconds > now:
            return

        if entry.last_used_at + self._config.dns_idle_ttl_seconds <= now:
            await self._store.delete(entry.host)
            self._stats.idle_expired += 1
            logger.debug(f"idle expired {entry.host}")
            return

        addresses = await self._lookup_addresses(entry.host)

        # Hits may have moved the cursor while we were resolving
        current = await self._store.get(entry.host)
        if current is None:
            return
        current.addresses = addresses
        current.updated_at = time.time()
        await self._store.set(current.host, current)
        self._stats.refreshed += 1
        logger.debug(f"refreshed {entry.host} -> {addresses}")

    async def prune_stale(self) -> int:
        """Ask the backend to purge entries past their TTL"""
        try:
            removed = await self._store.purge_stale()
        except Exception as e:
            self.record_error(e, f"Error purging stale entries: {e}")
            return 0
        if removed:
            logger.debug(f"purged {removed} stale entries")
        return removed

    def record_error(self, err: BaseException, message: Optional[str] = None) -> None:
        """Count and log a failure"""
        self._stats.record_error(err)
        logger.error(message or f"DNS cache error: {err}", exc_info=err)

    async def get_stats(self) -> DnsCacheStats:
        """Snapshot of the statistics, with the live backend size"""
        try:
            size = await self._store.size()
        except BackendError as e:
            self.record_error(e, f"Error reading cache size: {e}")
            size = 0
        return self._stats.snapshot(size)

    async def get_entries(self) -> list[DnsEntry]:
        """Copies of all live cache entries"""
        try:
            return await self._store.entries()
        except BackendError as e:
            self.record_error(e, f"Error listing cache entries: {e}")
            return []

    def start(self) -> None:
        """Start background refresh and periodic prune"""
        self.start_background_refresh()
        self.start_periodic_prune()

    def start_background_refresh(self) -> None:
        """(Re)arm the refresh loop"""
        self._refresh_task.start()
        logger.info(f"background refresh every {self._config.background_scan_seconds}s")

    def start_periodic_prune(self) -> None:
        """(Re)arm the prune loop"""
        self._prune_task.start()
        logger.info(f"stale prune every {self._config.dns_idle_ttl_seconds}s")

    @property
    def running(self) -> bool:
        return self._refresh_task.running or self._prune_task.running

    async def stop(self) -> None:
        """Stop both background loops, letting an in-flight scan finish"""
        was_running = self.running
        await self._refresh_task.stop()
        await self._prune_task.stop()
        if was_running:
            logger.info("background refresh and prune stopped")

    async def reset(self) -> None:
        """Stop background loops, clear the backend and zero the counters"""
        await self.stop()
        await self._store.clear()
        self._stats.reset()

    async def close(self) -> None:
        """Stop background loops and release the backend"""
        await self.stop()
        await self._store.close()

    async def __aenter__(self) -> "DnsCacheResolver":
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


def create_dns_cache_resolver(
    config: Optional[DnsCacheConfig] = None,
    store: Optional[DnsEntryStore] = None,
    lookup: Optional[AddressLookup] = None,
) -> DnsCacheResolver:
    """Factory function to create a DNS cache resolver"""
    return DnsCacheResolver(config, store, lookup)
