"""
Shared HTTP client for OSV lookups.
"""

import logging
from typing import Optional

import httpx

from lvs import __version__

logger = logging.getLogger(__name__)

USER_AGENT = f"lvs/{__version__}"

# Upper bound for the connect phase
CONNECT_TIMEOUT = 10.0

_async_client: Optional[httpx.AsyncClient] = None


def create_async_client(timeout: float = 30.0, max_connections: int = 8) -> httpx.AsyncClient:
    """
    Build an AsyncClient sized for ``max_connections`` parallel OSV queries.

    Args:
        timeout: Seconds before a request is abandoned
        max_connections: Upper bound on open connections, usually the
            configured query concurrency

    Returns:
        A new client; the caller owns it and must close it
    """
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout, connect=min(timeout, CONNECT_TIMEOUT)),
        limits=httpx.Limits(
            max_keepalive_connections=max_connections,
            max_connections=max_connections,
        ),
        headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
    )


def get_async_client(timeout: float = 30.0, max_connections: int = 8) -> httpx.AsyncClient:
    """
    Return the process-wide client, creating it on first use.

    Settings passed after the first call are ignored until
    :func:`close_async_client` is awaited.
    """
    global _async_client

    if _async_client is None:
        _async_client = create_async_client(timeout=timeout, max_connections=max_connections)
        logger.debug(f"Created shared HTTP client (timeout={timeout}s, connections={max_connections})")

    return _async_client


async def close_async_client() -> None:
    """Close the shared client, if one was created."""
    global _async_client
    if _async_client is not None:
        await _async_client.aclose()
        _async_client = None
        logger.debug("Closed shared HTTP client")


__all__ = [
    "create_async_client",
    "get_async_client",
    "close_async_client",
]
