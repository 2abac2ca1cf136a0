"""
Shared outbound HTTP client.

Provides a singleton httpx.AsyncClient so probes and relayed uploads share a
connection pool. Per-request timeouts override the client default.
"""
import asyncio
from typing import Optional

import httpx
from app.core.config import settings
from app.core.logging_config import log_info

_client: Optional[httpx.AsyncClient] = None
_client_lock: Optional[asyncio.Lock] = None


def _get_lock() -> asyncio.Lock:
    """Get or create the client lock."""
    global _client_lock
    if _client_lock is None:
        _client_lock = asyncio.Lock()
    return _client_lock


async def get_http_client() -> httpx.AsyncClient:
    """
    Get the shared AsyncClient instance.

    Creates a new instance if one doesn't exist or is closed. Redirects are not
    followed: a 3xx from an external service is reported as-is.
    """
    global _client
    if _client is None or _client.is_closed:
        async with _get_lock():
            if _client is None or _client.is_closed:
                timeout = settings.http_client_timeout_seconds
                _client = httpx.AsyncClient(timeout=timeout, follow_redirects=False)
                log_info("HTTP client created", timeout=timeout)
    return _client


async def close_http_client():
    """Close the shared client if it exists."""
    global _client
    async with _get_lock():
        if _client and not _client.is_closed:
            await _client.aclose()
            _client = None
            log_info("HTTP client closed")
