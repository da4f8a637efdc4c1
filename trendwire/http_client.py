import asyncio
import logging

import httpx

from .config import Settings, get_settings

logger = logging.getLogger(__name__)

_client: httpx.AsyncClient | None = None
_client_lock = asyncio.Lock()


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    """Client shared by feed downloads and ranking calls."""
    return httpx.AsyncClient(
        timeout=settings.http_timeout,
        limits=httpx.Limits(
            max_connections=settings.http_max_connections,
            max_keepalive_connections=settings.http_max_keepalive,
        ),
        headers={"User-Agent": settings.http_user_agent},
        # feed hosts often move to https or a CDN
        follow_redirects=True,
    )


async def get_http_client(settings: Settings | None = None) -> httpx.AsyncClient:
    global _client

    if _client is None:
        async with _client_lock:
            if _client is None:
                _client = build_http_client(settings or get_settings())
                logger.debug("Opened shared HTTP client")
    return _client


async def shutdown_http_client() -> None:
    global _client
    if _client is None:
        return
    client, _client = _client, None
    await client.aclose()
    logger.debug("Closed shared HTTP client")
