"""
Configuration utilities for cached_dns_resolve
"""
import ipaddress
import logging
import os
from typing import Mapping, Optional

from .errors import ConfigurationError
from .types import DnsCacheConfig, LoggingConfig, RedisConfig

logger = logging.getLogger(__name__)

LOG_PREFIX = "[config]"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_REDIS_URL = "redis://localhost:6379/0"


def _env_flag(environ: Mapping[str, str], name: str, default: bool = False) -> bool:
    value = environ.get(name)
    if value is None or value == "":
        return default
    return value.strip().lower() == "true"


def _env_number(environ: Mapping[str, str], name: str, default: float) -> float:
    value = environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from None


def load_config_from_env(environ: Optional[Mapping[str, str]] = None) -> DnsCacheConfig:
    """
    Build a DnsCacheConfig from DNS_CACHE_* environment variables.

    Durations are read in milliseconds (DNS_CACHE_REDIS_TTL in seconds)
    and converted to seconds.

    Args:
        environ: Mapping to read from. Default: os.environ

    Returns:
        A validated DnsCacheConfig
    """
    if environ is None:
        environ = os.environ

    redis_config = None
    if _env_flag(environ, "DNS_CACHE_USE_REDIS"):
        redis_ttl = environ.get("DNS_CACHE_REDIS_TTL")
        redis_config = RedisConfig(
            url=environ.get("DNS_CACHE_REDIS_URL") or DEFAULT_REDIS_URL,
            password=environ.get("DNS_CACHE_REDIS_PASSWORD") or None,
            ttl_seconds=(
                _env_number(environ, "DNS_CACHE_REDIS_TTL", 0.0) if redis_ttl else None
            ),
        )

    config = DnsCacheConfig(
        disabled=_env_flag(environ, "DNS_CACHE_DISABLE"),
        dns_ttl_seconds=_env_number(environ, "DNS_CACHE_TTL_MS", 5000) / 1000,
        cache_grace_expire_multiplier=_env_number(environ, "DNS_CACHE_EXPIRE_MULTIPLIER", 2),
        dns_idle_ttl_seconds=_env_number(environ, "DNS_CACHE_IDLE_TTL_MS", 3600000) / 1000,
        background_scan_seconds=_env_number(environ, "DNS_CACHE_BACKGROUND_SCAN_MS", 2400) / 1000,
        dns_cache_size=int(_env_number(environ, "DNS_CACHE_SIZE", 100)),
        lookup_timeout_seconds=_env_number(environ, "DNS_CACHE_LOOKUP_TIMEOUT_MS", 5000) / 1000,
        logging=LoggingConfig(
            level=(environ.get("DNS_CACHE_LOG_LEVEL") or "INFO").upper(),
            pretty=_env_flag(environ, "DNS_CACHE_LOG_PRETTY"),
        ),
        redis=redis_config,
    )

    logger.debug(
        f"{LOG_PREFIX} load_config_from_env: backend={'redis' if redis_config else 'memory'} "
        f"ttl={config.dns_ttl_seconds}s idle={config.dns_idle_ttl_seconds}s "
        f"scan={config.background_scan_seconds}s"
    )
    return validate_config(config)


def validate_config(config: DnsCacheConfig) -> DnsCacheConfig:
    """
    Check a config for invalid or contradictory options.

    Raises:
        ConfigurationError: On the first problem found
    """
    for name in (
        "dns_ttl_seconds",
        "dns_idle_ttl_seconds",
        "background_scan_seconds",
        "lookup_timeout_seconds",
    ):
        value = getattr(config, name)
        if value <= 0:
            raise ConfigurationError(f"{name} must be positive, got {value}")

    if config.cache_grace_expire_multiplier <= 1:
        raise ConfigurationError(
            "cache_grace_expire_multiplier must be greater than 1 so the backend "
            f"keeps entries past dns_ttl_seconds, got {config.cache_grace_expire_multiplier}"
        )

    if config.dns_cache_size < 1:
        raise ConfigurationError(f"dns_cache_size must be at least 1, got {config.dns_cache_size}")

    if config.logging.level.upper() not in LOG_LEVELS:
        raise ConfigurationError(f"Unknown log level: {config.logging.level}")

    if config.redis is not None:
        if not config.redis.url:
            raise ConfigurationError("Redis backend selected without a URL")
        if config.redis.ttl_seconds is not None and config.redis.ttl_seconds <= 0:
            raise ConfigurationError(
                f"redis.ttl_seconds must be positive, got {config.redis.ttl_seconds}"
            )
        if (
            config.redis.ttl_seconds is not None
            and config.redis.ttl_seconds <= config.dns_ttl_seconds
        ):
            raise ConfigurationError(
                f"redis.ttl_seconds ({config.redis.ttl_seconds}) must exceed "
                f"dns_ttl_seconds ({config.dns_ttl_seconds}) so entries live until refreshed"
            )

    return config


def store_ttl_seconds(config: DnsCacheConfig) -> float:
    """TTL the active backend should apply to entries"""
    if config.redis is not None and config.redis.ttl_seconds is not None:
        return config.redis.ttl_seconds
    return config.backend_ttl_seconds


def is_ip_address(host: str) -> bool:
    """Check if a host is an IPv4 or IPv6 literal"""
    try:
        ipaddress.ip_address(host.strip("[]"))
        return True
    except ValueError:
        return False
