"""Shared HTTP client pool for connection reuse across sources.

Hey future me - this is the CENTRAL http client pool! Every source that talks HTTP
(Subsonic, Spotify, Last.fm, ...) gets its client from here unless the SourceFactory
was handed an explicit client (tests do that with httpx.MockTransport). Two subsonic
sources pointing at the same server share keep-alive connections this way.

Usage:
    from scrobblehub.infrastructure.integrations.http_pool import HttpClientPool

    client = await HttpClientPool.get_client()
    response = await client.get("https://music.example.com/rest/ping")

Don't forget to call HttpClientPool.close() at shutdown!
"""

import asyncio
import logging
from typing import ClassVar

import httpx

from scrobblehub.config import HttpSettings

logger = logging.getLogger(__name__)


class HttpClientPool:
    """Singleton HTTP client pool for connection reuse.

    Features:
    - Lazy initialization (created on first use)
    - Safe under concurrent first use via asyncio.Lock
    - Configurable limits (connections, timeouts)
    - Proper cleanup at shutdown
    """

    _client: ClassVar[httpx.AsyncClient | None] = None
    _lock: ClassVar[asyncio.Lock | None] = None

    @classmethod
    async def _ensure_lock(cls) -> asyncio.Lock:
        """Ensure lock exists (lazy so it binds to the running event loop)."""
        if cls._lock is None:
            cls._lock = asyncio.Lock()
        return cls._lock

    @classmethod
    async def get_client(cls, settings: HttpSettings | None = None) -> httpx.AsyncClient:
        """Get the shared HTTP client instance.

        Creates the client on first call with the provided configuration.
        Subsequent calls return the same instance (ignoring new config values).

        Args:
            settings: Timeout/limit configuration (defaults to HttpSettings())

        Returns:
            Shared httpx.AsyncClient instance
        """
        lock = await cls._ensure_lock()

        async with lock:
            if cls._client is None:
                http = settings or HttpSettings()
                cls._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(http.timeout),
                    limits=httpx.Limits(
                        max_keepalive_connections=http.max_keepalive,
                        max_connections=http.max_connections,
                    ),
                    follow_redirects=True,
                )
                logger.info(
                    "HTTP client pool initialized (timeout=%.1fs, keepalive=%d, max_conn=%d)",
                    http.timeout,
                    http.max_keepalive,
                    http.max_connections,
                )

            return cls._client

    @classmethod
    async def close(cls) -> None:
        """Close the shared HTTP client and release all connections.

        After calling close(), get_client() will create a new client instance.
        """
        lock = await cls._ensure_lock()

        async with lock:
            if cls._client is not None:
                await cls._client.aclose()
                cls._client = None
                logger.info("HTTP client pool closed")

    @classmethod
    def is_initialized(cls) -> bool:
        """Check if the client pool has been initialized."""
        return cls._client is not None
