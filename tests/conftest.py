"""Pytest configuration and fixtures for cached_dns_resolve tests."""
import asyncio
import fnmatch
import time
from typing import Any, AsyncGenerator, Optional

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from cached_dns_resolve import DnsCacheConfig, DnsCacheResolver, DnsEntry, MemoryStore


class FakeLookup:
    """Address lookup backed by a table, recording every call"""

    def __init__(self, table: Optional[dict[str, list[str]]] = None, delay: float = 0.0):
        self.table = dict(table or {})
        self.delay = delay
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def __call__(self, host: str) -> list[str]:
        self.calls.append(host)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if host not in self.table:
                raise LookupError(f"unknown host {host}")
            return list(self.table[host])
        finally:
            self.in_flight -= 1


class FakeRedis:
    """In-process stand-in for the redis.asyncio client surface RedisStore uses"""

    def __init__(self, fail: bool = False):
        self.data: dict[str, tuple[str, Optional[float]]] = {}
        self.fail = fail
        self.closed = False
        self.set_calls: list[tuple[str, Optional[int]]] = []

    def _check(self) -> None:
        if self.fail:
            raise RedisConnectionError("connection refused")

    def _live(self, name: str) -> Optional[str]:
        item = self.data.get(name)
        if item is None:
            return None
        value, expires_at = item
        if expires_at is not None and time.time() >= expires_at:
            del self.data[name]
            return None
        return value

    async def get(self, name: str) -> Any:
        self._check()
        return self._live(name)

    async def set(self, name: str, value: str, px: Optional[int] = None) -> Any:
        self._check()
        self.set_calls.append((name, px))
        expires_at = time.time() + px / 1000 if px is not None else None
        self.data[name] = (value, expires_at)
        return True

    async def exists(self, *names: str) -> int:
        self._check()
        return sum(1 for name in names if self._live(name) is not None)

    async def delete(self, *names: str) -> int:
        self._check()
        removed = 0
        for name in names:
            if self._live(name) is not None:
                del self.data[name]
                removed += 1
        return removed

    async def scan_iter(self, match: Optional[str] = None):
        self._check()
        for name in list(self.data):
            if self._live(name) is None:
                continue
            if match is None or fnmatch.fnmatchcase(name, match):
                yield name

    async def aclose(self) -> None:
        self.closed = True


def make_entry(
    host: str,
    addresses: Optional[list[str]] = None,
    *,
    next_index: int = 0,
    age: float = 0.0,
    idle: float = 0.0,
) -> DnsEntry:
    """Entry last resolved `age` seconds ago and last used `idle` seconds ago"""
    now = time.time()
    return DnsEntry(
        host=host,
        addresses=addresses or ["10.0.0.1"],
        next_index=next_index,
        last_used_at=now - idle,
        updated_at=now - age,
    )


def make_config(**overrides: Any) -> DnsCacheConfig:
    """Short timings so background behaviour is observable in tests"""
    defaults: dict[str, Any] = {
        "dns_ttl_seconds": 1.0,
        "dns_idle_ttl_seconds": 5.0,
        "cache_grace_expire_multiplier": 2.0,
        "background_scan_seconds": 0.1,
        "dns_cache_size": 100,
    }
    defaults.update(overrides)
    return DnsCacheConfig(**defaults)


@pytest.fixture
def lookup() -> FakeLookup:
    return FakeLookup({
        "example.com": ["93.184.216.34"],
        "a.test": ["10.0.0.1"],
        "b.test": ["10.0.1.1", "10.0.1.2"],
        "rr.test": ["10.0.2.1", "10.0.2.2", "10.0.2.3"],
    })


@pytest.fixture
def config() -> DnsCacheConfig:
    return make_config()


@pytest.fixture
async def resolver(
    config: DnsCacheConfig, lookup: FakeLookup
) -> AsyncGenerator[DnsCacheResolver, None]:
    """Resolver over a fresh memory store, background loops not started"""
    store = MemoryStore(config.dns_cache_size, config.backend_ttl_seconds)
    resolver = DnsCacheResolver(config, store=store, lookup=lookup)
    yield resolver
    await resolver.close()
