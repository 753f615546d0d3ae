"""
Hostname resolution cache for outbound HTTP calls, with round-robin address
selection, background refresh and pluggable (memory/Redis) backends.
"""
from .types import (
    AddressLookup,
    DnsCacheConfig,
    DnsCacheStats,
    DnsEntry,
    DnsEntryStore,
    LoggingConfig,
    RedisConfig,
)
from .errors import (
    BackendError,
    ConfigurationError,
    DnsCacheError,
    NoAddressError,
    ResolutionError,
)
from .config import (
    is_ip_address,
    load_config_from_env,
    store_ttl_seconds,
    validate_config,
)
from .log import init_logger
from .lookup import NameResolver
from .scheduler import RecurringTask
from .stats import StatsRegistry
from .stores import (
    MemoryStore,
    RedisStore,
    create_memory_store,
    create_redis_store,
    create_store,
)
from .resolver import DnsCacheResolver, create_dns_cache_resolver
from .transport import DnsCacheTransport
from .factory import create_dns_cached_client


__all__ = [
    # Types
    "AddressLookup",
    "DnsCacheConfig",
    "DnsCacheStats",
    "DnsEntry",
    "DnsEntryStore",
    "LoggingConfig",
    "RedisConfig",
    # Errors
    "BackendError",
    "ConfigurationError",
    "DnsCacheError",
    "NoAddressError",
    "ResolutionError",
    # Config
    "is_ip_address",
    "load_config_from_env",
    "store_ttl_seconds",
    "validate_config",
    "init_logger",
    # Resolution
    "NameResolver",
    "RecurringTask",
    "StatsRegistry",
    # Stores
    "MemoryStore",
    "RedisStore",
    "create_memory_store",
    "create_redis_store",
    "create_store",
    # Resolver
    "DnsCacheResolver",
    "create_dns_cache_resolver",
    # httpx
    "DnsCacheTransport",
    "create_dns_cached_client",
]


__version__ = "1.0.0"
