"""
Exceptions raised by cached_dns_resolve
"""
from typing import Optional


class DnsCacheError(Exception):
    """Base class for all cache errors"""


class ResolutionError(DnsCacheError):
    """Hostname could not be resolved by any strategy"""

    def __init__(self, message: str, host: Optional[str] = None) -> None:
        super().__init__(message)
        self.host = host


class NoAddressError(ResolutionError):
    """Every resolution strategy returned zero usable addresses"""


class BackendError(DnsCacheError):
    """A storage backend operation failed"""


class ConfigurationError(DnsCacheError, ValueError):
    """Invalid or contradictory configuration"""
