"""
Tests for configuration loading and validation
"""

import logging

import pytest

from cached_dns_resolve import (
    ConfigurationError,
    DnsCacheConfig,
    LoggingConfig,
    RedisConfig,
    init_logger,
    is_ip_address,
    load_config_from_env,
    store_ttl_seconds,
    validate_config,
)


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env"""

    def test_defaults(self):
        """Should use defaults when no variable is set"""
        config = load_config_from_env({})
        assert config.disabled is False
        assert config.dns_ttl_seconds == 5.0
        assert config.cache_grace_expire_multiplier == 2.0
        assert config.dns_idle_ttl_seconds == 3600.0
        assert config.background_scan_seconds == 2.4
        assert config.dns_cache_size == 100
        assert config.lookup_timeout_seconds == 5.0
        assert config.logging.level == "INFO"
        assert config.logging.pretty is False
        assert config.redis is None

    def test_milliseconds_are_converted(self):
        """Should convert millisecond variables to seconds"""
        config = load_config_from_env({
            "DNS_CACHE_TTL_MS": "100",
            "DNS_CACHE_IDLE_TTL_MS": "500",
            "DNS_CACHE_BACKGROUND_SCAN_MS": "10",
            "DNS_CACHE_LOOKUP_TIMEOUT_MS": "250",
            "DNS_CACHE_EXPIRE_MULTIPLIER": "3",
            "DNS_CACHE_SIZE": "7",
        })
        assert config.dns_ttl_seconds == 0.1
        assert config.dns_idle_ttl_seconds == 0.5
        assert config.background_scan_seconds == 0.01
        assert config.lookup_timeout_seconds == 0.25
        assert config.cache_grace_expire_multiplier == 3.0
        assert config.dns_cache_size == 7

    @pytest.mark.parametrize("value,expected", [
        ("true", True),
        ("TRUE", True),
        ("false", False),
        ("1", False),
        ("", False),
    ])
    def test_disable_flag(self, value, expected):
        """Should only treat "true" as enabling DNS_CACHE_DISABLE"""
        assert load_config_from_env({"DNS_CACHE_DISABLE": value}).disabled is expected

    def test_logging_settings(self):
        """Should read log level and pretty flag"""
        config = load_config_from_env({
            "DNS_CACHE_LOG_LEVEL": "debug",
            "DNS_CACHE_LOG_PRETTY": "true",
        })
        assert config.logging.level == "DEBUG"
        assert config.logging.pretty is True

    def test_redis_defaults(self):
        """Should use the default Redis URL when only the flag is set"""
        config = load_config_from_env({"DNS_CACHE_USE_REDIS": "true"})
        assert config.redis == RedisConfig(url="redis://localhost:6379/0")

    def test_redis_settings(self):
        """Should read Redis URL, password and TTL"""
        config = load_config_from_env({
            "DNS_CACHE_USE_REDIS": "true",
            "DNS_CACHE_REDIS_URL": "redis://cache:6380/2",
            "DNS_CACHE_REDIS_PASSWORD": "secret",
            "DNS_CACHE_REDIS_TTL": "30",
        })
        assert config.redis.url == "redis://cache:6380/2"
        assert config.redis.password == "secret"
        assert config.redis.ttl_seconds == 30.0

    def test_redis_settings_ignored_without_flag(self):
        """Should ignore Redis settings unless Redis is enabled"""
        config = load_config_from_env({"DNS_CACHE_REDIS_URL": "redis://cache:6380/2"})
        assert config.redis is None

    def test_reads_process_environment(self, monkeypatch):
        """Should read os.environ when no mapping is given"""
        monkeypatch.setenv("DNS_CACHE_TTL_MS", "2000")
        assert load_config_from_env().dns_ttl_seconds == 2.0

    def test_non_numeric_value_names_variable(self):
        """Should name the variable holding a non-numeric value"""
        with pytest.raises(ConfigurationError, match="DNS_CACHE_TTL_MS"):
            load_config_from_env({"DNS_CACHE_TTL_MS": "soon"})

    def test_invalid_values_rejected(self):
        """Should validate values loaded from the environment"""
        with pytest.raises(ConfigurationError):
            load_config_from_env({"DNS_CACHE_SIZE": "0"})
        with pytest.raises(ConfigurationError):
            load_config_from_env({"DNS_CACHE_EXPIRE_MULTIPLIER": "1"})
        with pytest.raises(ConfigurationError):
            load_config_from_env({"DNS_CACHE_LOG_LEVEL": "chatty"})


class TestValidateConfig:
    """Tests for validate_config"""

    def test_default_config_is_valid(self):
        """Should accept the default config"""
        config = DnsCacheConfig()
        assert validate_config(config) is config

    @pytest.mark.parametrize("field", [
        "dns_ttl_seconds",
        "dns_idle_ttl_seconds",
        "background_scan_seconds",
        "lookup_timeout_seconds",
    ])
    def test_non_positive_durations(self, field):
        """Should reject zero durations"""
        with pytest.raises(ConfigurationError, match=field):
            validate_config(DnsCacheConfig(**{field: 0}))

    def test_multiplier_must_exceed_one(self):
        """Should reject a multiplier of 1 or less"""
        with pytest.raises(ConfigurationError):
            validate_config(DnsCacheConfig(cache_grace_expire_multiplier=1.0))

    def test_cache_size_must_be_positive(self):
        """Should reject a zero cache size"""
        with pytest.raises(ConfigurationError):
            validate_config(DnsCacheConfig(dns_cache_size=0))

    def test_redis_requires_url(self):
        """Should reject an empty Redis URL"""
        with pytest.raises(ConfigurationError):
            validate_config(DnsCacheConfig(redis=RedisConfig(url="")))

    def test_redis_ttl_must_be_positive(self):
        """Should reject a zero Redis TTL"""
        with pytest.raises(ConfigurationError):
            validate_config(DnsCacheConfig(redis=RedisConfig(ttl_seconds=0)))

    @pytest.mark.parametrize("redis_ttl", [1.0, 5.0])
    def test_redis_ttl_must_outlive_refresh_threshold(self, redis_ttl):
        """Should reject a Redis TTL that expires entries before they are due for refresh"""
        config = DnsCacheConfig(dns_ttl_seconds=5.0, redis=RedisConfig(ttl_seconds=redis_ttl))
        with pytest.raises(ConfigurationError, match="dns_ttl_seconds"):
            validate_config(config)

    def test_redis_ttl_above_refresh_threshold(self):
        """Should accept a Redis TTL longer than dns_ttl_seconds"""
        config = DnsCacheConfig(dns_ttl_seconds=5.0, redis=RedisConfig(ttl_seconds=5.5))
        assert validate_config(config) is config

    def test_redis_ttl_from_env_checked(self):
        """Should reject DNS_CACHE_REDIS_TTL at or below DNS_CACHE_TTL_MS"""
        with pytest.raises(ConfigurationError):
            load_config_from_env({
                "DNS_CACHE_USE_REDIS": "true",
                "DNS_CACHE_TTL_MS": "5000",
                "DNS_CACHE_REDIS_TTL": "3",
            })

    def test_configuration_error_is_value_error(self):
        """Should raise an error that is also a ValueError"""
        with pytest.raises(ValueError):
            validate_config(DnsCacheConfig(dns_cache_size=-1))


class TestStoreTtl:
    """Tests for store_ttl_seconds"""

    def test_grace_window(self):
        """Should multiply dns_ttl_seconds by the grace multiplier"""
        config = DnsCacheConfig(dns_ttl_seconds=5.0, cache_grace_expire_multiplier=3.0)
        assert config.backend_ttl_seconds == 15.0
        assert store_ttl_seconds(config) == 15.0

    def test_redis_override(self):
        """Should use the explicit Redis TTL"""
        config = DnsCacheConfig(redis=RedisConfig(ttl_seconds=60.0))
        assert store_ttl_seconds(config) == 60.0

    def test_redis_without_override(self):
        """Should fall back to the grace window for Redis"""
        config = DnsCacheConfig(redis=RedisConfig())
        assert store_ttl_seconds(config) == 10.0


class TestIsIpAddress:
    """Tests for is_ip_address"""

    @pytest.mark.parametrize("host", ["10.0.0.1", "127.0.0.1", "::1", "[::1]", "2001:db8::1"])
    def test_ip_literals(self, host):
        """Should recognise IPv4 and IPv6 literals"""
        assert is_ip_address(host) is True

    @pytest.mark.parametrize("host", ["example.com", "localhost", "10.0.0", ""])
    def test_hostnames(self, host):
        """Should not treat hostnames as IP literals"""
        assert is_ip_address(host) is False


class TestInitLogger:
    """Tests for init_logger"""

    def test_sets_level_and_single_handler(self):
        """Should set the level and attach a single handler"""
        name = "cached_dns_resolve.test_init_logger"
        log = init_logger(LoggingConfig(name=name, level="DEBUG"))
        assert log.level == logging.DEBUG
        assert len(log.handlers) == 1

        init_logger(LoggingConfig(name=name, level="WARNING"))
        assert log.level == logging.WARNING
        assert len(log.handlers) == 1
        assert log.propagate is False

    def test_pretty_uses_rich(self):
        """Should attach a RichHandler in pretty mode"""
        from rich.logging import RichHandler

        log = init_logger(LoggingConfig(name="cached_dns_resolve.test_pretty", pretty=True))
        assert isinstance(log.handlers[0], RichHandler)
