"""
Name resolution adapter: dnspython first, system resolver as fallback.
"""
import asyncio
import logging
import socket
from typing import Optional

import dns.asyncresolver
import dns.exception

from .errors import NoAddressError
from .types import AddressLookup

logger = logging.getLogger(__name__)


class NameResolver:
    """
    Resolves a hostname to its IPv4 addresses.

    The primary strategy queries A records through dnspython. When it fails
    or answers nothing (names only known to /etc/hosts, search-domain
    names, unreachable nameservers) the system resolver is asked through
    getaddrinfo, which enumerates every address the host has.

    Example:
        resolver = NameResolver(timeout_seconds=2.0)
        addresses = await resolver.resolve("example.com")
    """

    def __init__(
        self,
        timeout_seconds: float = 5.0,
        primary: Optional[AddressLookup] = None,
        fallback: Optional[AddressLookup] = None,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._primary = primary or self._resolve_dns
        self._fallback = fallback or self._resolve_system

    async def resolve(self, host: str) -> list[str]:
        """
        Resolve a hostname.

        Raises:
            NoAddressError: Both strategies returned no usable address
        """
        try:
            addresses = await self._primary(host)
            if addresses:
                return addresses
            logger.debug(f"Primary lookup returned no address for {host}, falling back")
        except Exception as e:
            logger.debug(f"Primary lookup failed for {host}: {e}, falling back")

        try:
            addresses = await self._fallback(host)
        except Exception as e:
            raise NoAddressError(f"No address found for {host}: {e}", host=host) from e

        if not addresses:
            raise NoAddressError(f"Fallback lookup returned no address for {host}", host=host)
        return addresses

    async def _resolve_dns(self, host: str) -> list[str]:
        """A-record query through dnspython"""
        try:
            answer = await dns.asyncresolver.resolve(host, "A", lifetime=self._timeout_seconds)
        except dns.exception.DNSException as e:
            raise LookupError(f"DNS query for {host} failed: {e}") from e
        return [rdata.address for rdata in answer]

    async def _resolve_system(self, host: str) -> list[str]:
        """getaddrinfo in the default executor, de-duplicated in order"""
        loop = asyncio.get_running_loop()
        infos = await loop.getaddrinfo(host, None, family=socket.AF_INET, type=socket.SOCK_STREAM)

        addresses: list[str] = []
        for family, socktype, proto, canonname, sockaddr in infos:
            address = sockaddr[0]
            if address not in addresses:
                addresses.append(address)
        return addresses
