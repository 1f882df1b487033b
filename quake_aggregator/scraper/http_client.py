"""Async HTTP client setup and conditional GET helper."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx

from quake_aggregator import config
from quake_aggregator.errors import UpstreamUnavailable

logger = logging.getLogger(__name__)

NOT_MODIFIED = 304


@asynccontextmanager
async def with_client(
    *,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """Async context manager yielding a client with project defaults applied."""
    client = httpx.AsyncClient(
        headers=config.DEFAULT_HEADERS,
        timeout=config.REQUEST_TIMEOUT_SECONDS if timeout is None else timeout,
        follow_redirects=True,
        transport=transport,
    )
    try:
        yield client
    finally:
        await client.aclose()


async def conditional_get(
    client: httpx.AsyncClient,
    url: str,
    token: Optional[str] = None,
    *,
    timeout: Optional[float] = None,
) -> httpx.Response:
    """GET ``url`` with ``If-Modified-Since`` when a token is known.

    Returns the response for 200-range and 304 answers; anything else raises
    ``UpstreamUnavailable``.
    """
    headers = {"If-Modified-Since": token} if token else {}
    request_timeout = timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT
    try:
        response = await client.get(url, headers=headers, timeout=request_timeout)
    except httpx.HTTPError as exc:
        raise UpstreamUnavailable(url, reason=f"{type(exc).__name__}: {exc}") from exc

    if response.status_code == NOT_MODIFIED:
        return response
    if not response.is_success:
        raise UpstreamUnavailable(url, status_code=response.status_code)
    return response
