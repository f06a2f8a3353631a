from __future__ import annotations

"""Lightweight async HTTP client util with retry.

Focus: GET JSON with limited retries and exponential backoff. Any non-2xx
status, transport error or JSON decode failure counts as a failed attempt.
"""
import asyncio
import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger("tokenswap.http")


class HttpError(Exception):
    pass


async def get_json(
    url: str,
    *,
    timeout: float = 5.0,
    retries: int = 2,
    backoff: float = 0.5,
    client: Optional[httpx.AsyncClient] = None,
) -> Any:
    last_err: Optional[Exception] = None
    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=timeout)
    try:
        for attempt in range(retries + 1):
            try:
                resp = await client.get(url, headers={"Accept": "application/json"})
                if not resp.is_success:
                    raise HttpError(f"HTTP {resp.status_code} for {url}")
                return resp.json()
            except (httpx.HTTPError, HttpError, ValueError) as e:  # ValueError for JSON decode
                last_err = e
                logger.debug("GET %s attempt %d failed: %s", url, attempt + 1, e)
                if attempt == retries:
                    break
                await asyncio.sleep(backoff * (2**attempt))
    finally:
        if owns_client:
            await client.aclose()
    raise HttpError(f"Failed to fetch JSON from {url}: {last_err}")
