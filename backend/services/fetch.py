"""HTTP GET with bounded retry for transient (5xx) failures."""

import asyncio
import logging
from typing import Awaitable, Callable

import httpx

from config import settings

logger = logging.getLogger(__name__)


async def fetch_with_retry(
    client: httpx.AsyncClient,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    retries: int | None = None,
    backoff_seconds: float | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> httpx.Response:
    """GET `url`, retrying server errors with linear backoff.

    Makes exactly `retries` attempts at most (at least one). A 5xx response
    is retried after `backoff_seconds * attempt`; any other failed status,
    or a 5xx on the final attempt, is returned as-is. Transport errors
    (DNS, connection refused, timeouts) are not retried and propagate.
    """
    attempts = max(1, settings.api_retries if retries is None else retries)
    backoff = settings.retry_backoff_seconds if backoff_seconds is None else backoff_seconds

    for attempt in range(1, attempts):
        response = await client.get(url, headers=headers)
        if response.is_success or response.status_code < 500:
            return response

        logger.warning(
            "Attempt %d/%d for %s failed with status %d, retrying...",
            attempt,
            attempts,
            url,
            response.status_code,
        )
        await sleep(backoff * attempt)

    return await client.get(url, headers=headers)
