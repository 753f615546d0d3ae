"""
Factory functions for DNS cached httpx clients
"""
from typing import Any, Optional

import httpx

from .config import load_config_from_env
from .log import init_logger
from .resolver import DnsCacheResolver
from .transport import DnsCacheTransport
from .types import DnsCacheConfig, DnsEntryStore


def create_dns_cached_client(
    resolver: Optional[DnsCacheResolver] = None,
    *,
    config: Optional[DnsCacheConfig] = None,
    store: Optional[DnsEntryStore] = None,
    proxy: Optional[str] = None,
    **client_kwargs: Any,
) -> httpx.AsyncClient:
    """
    Create an async client with DNS caching.

    When no resolver is given, one is built from config (or the DNS_CACHE_*
    environment variables), the package logger is configured from it and
    the background loops are started, so this must be called from a running
    event loop in that case. A resolver passed in leaves logging to the caller.

    Example:
        resolver = DnsCacheResolver(DnsCacheConfig(dns_ttl_seconds=10))
        resolver.start()
        client = create_dns_cached_client(resolver)
        response = await client.get('https://api.example.com/data')
        await client.aclose()
        await resolver.close()
    """
    if resolver is None:
        config = config or load_config_from_env()
        init_logger(config.logging)
        resolver = DnsCacheResolver(config, store)
        resolver.start()

    base_transport = httpx.AsyncHTTPTransport(proxy=proxy)
    transport = DnsCacheTransport(base_transport, resolver)
    return httpx.AsyncClient(transport=transport, **client_kwargs)
