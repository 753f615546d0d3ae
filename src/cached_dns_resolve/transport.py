"""
DNS cache transport wrapper for httpx
"""
import logging
from typing import Optional

import httpx

from .config import is_ip_address
from .resolver import DnsCacheResolver

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {"http": 80, "https": 443}


class DnsCacheTransport(httpx.AsyncBaseTransport):
    """
    DNS caching transport wrapper for httpx.

    Rewrites the request host to an address served by a DnsCacheResolver
    and keeps the original hostname in the Host header (and TLS SNI for
    https). The caller's request is never modified; a new request is sent
    instead. Any cache failure falls back to sending the original request.

    Example:
        resolver = DnsCacheResolver(config)
        resolver.start()
        transport = DnsCacheTransport(httpx.AsyncHTTPTransport(), resolver)
        client = httpx.AsyncClient(transport=transport)
    """

    def __init__(
        self,
        inner: httpx.AsyncBaseTransport,
        resolver: DnsCacheResolver,
    ) -> None:
        """
        Create a new DnsCacheTransport.

        Args:
            inner: The wrapped transport to delegate requests to
            resolver: The cache to resolve hostnames through
        """
        self._inner = inner
        self._resolver = resolver

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        """Handle an async HTTP request with DNS caching"""
        resolved = await self._resolve_request(request)
        return await self._inner.handle_async_request(resolved or request)

    async def _resolve_request(self, request: httpx.Request) -> Optional[httpx.Request]:
        """Build the rewritten request, or None to send the original"""
        if self._resolver.config.disabled:
            return None

        host = request.url.host
        if not host or is_ip_address(host):
            return None

        try:
            address = await self._resolver.resolve_address(host)
        except Exception as e:
            self._resolver.record_error(e, f"Error resolving {host}, sending request unchanged: {e}")
            return None

        # httpx fills Host from the URL when the request is built; keep it
        headers = httpx.Headers(request.headers)
        if "host" not in headers:
            port = request.url.port
            if port is None or port == DEFAULT_PORTS.get(request.url.scheme):
                headers["host"] = host
            else:
                headers["host"] = f"{host}:{port}"

        extensions = dict(request.extensions)
        if request.url.scheme == "https":
            extensions.setdefault("sni_hostname", host)

        return httpx.Request(
            method=request.method,
            url=request.url.copy_with(host=address),
            headers=headers,
            stream=request.stream,
            extensions=extensions,
        )

    @property
    def resolver(self) -> DnsCacheResolver:
        """Get the underlying DNS cache resolver"""
        return self._resolver

    async def aclose(self) -> None:
        """Close the wrapped transport. The resolver is owned by the caller"""
        await self._inner.aclose()
