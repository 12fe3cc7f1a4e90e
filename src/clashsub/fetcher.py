"""Download subscription payloads over HTTP(S)."""
from __future__ import annotations

import asyncio
import logging
import random
from typing import Dict, Optional
from urllib.parse import urlparse

import aiohttp

from .config import NetworkSettings
from .exceptions import NetworkError

SAFE_URL_SCHEMES = ("http", "https")


def is_http_url(url: str) -> bool:
    """Return True for absolute http:// or https:// URLs."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in SAFE_URL_SCHEMES and bool(parsed.netloc)


async def fetch_subscription(
    session: aiohttp.ClientSession,
    url: str,
    timeout: int = 10,
    *,
    retries: int = 3,
    base_delay: float = 1.0,
    jitter: float = 0.1,
    proxy: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
) -> bytes:
    """
    Fetch a subscription body with retries and exponential backoff.

    Server errors, 429 responses and connection failures are retried; other
    4xx responses fail immediately.

    Args:
        session: The aiohttp client session to use for the request.
        url: The subscription URL.
        timeout: The total timeout for each attempt in seconds.
        retries: The maximum number of attempts.
        base_delay: The base delay for the exponential backoff in seconds.
        jitter: A random factor added to the delay.
        proxy: The proxy URL to use for the request.
        headers: Extra request headers.

    Returns:
        The raw response body.
    Raises:
        NetworkError: If the URL is invalid, the server rejects the request,
            or every attempt fails.
    """
    if not is_http_url(url):
        raise NetworkError(f"Invalid subscription URL: {url}")

    last_exc: Optional[BaseException] = None
    attempt = 0
    while attempt < retries:
        try:
            async with session.get(
                url,
                timeout=aiohttp.ClientTimeout(total=timeout),
                proxy=proxy,
                headers=headers,
            ) as resp:
                if resp.status == 200:
                    return await resp.read()
                if 400 <= resp.status < 500 and resp.status != 429:
                    raise NetworkError(
                        f"Non-retryable client error for {url}: {resp.status}"
                    )
                last_exc = aiohttp.ClientResponseError(
                    resp.request_info,
                    resp.history,
                    status=resp.status,
                    message=resp.reason or "",
                    headers=resp.headers,
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logging.debug("fetch_subscription error on %s: %s", url, exc)
            last_exc = exc

        attempt += 1
        if attempt >= retries:
            break

        backoff = base_delay * (2 ** (attempt - 1))
        sleep_duration = backoff + (backoff * random.uniform(0, jitter))
        logging.debug(
            "Attempt %d/%d failed for %s. Retrying in %.2f seconds...",
            attempt,
            retries,
            url,
            sleep_duration,
        )
        await asyncio.sleep(sleep_duration)

    raise NetworkError(f"Failed to fetch {url} after {retries} attempts.") from last_exc


async def fetch_with_settings(
    session: aiohttp.ClientSession, url: str, network: NetworkSettings
) -> bytes:
    """Fetch ``url`` using the timeouts, retries and headers from settings."""
    return await fetch_subscription(
        session,
        url,
        network.request_timeout,
        retries=network.retry_attempts,
        base_delay=network.retry_base_delay,
        jitter=network.retry_jitter,
        proxy=network.http_proxy,
        headers=network.headers,
    )
