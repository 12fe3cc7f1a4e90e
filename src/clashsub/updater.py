"""Refresh Mihomo Party profiles from their subscription URLs.

A subscription answers either with a full daemon config, which is stored
verbatim, or with a raw list of share links. Raw lists are converted into a
full config by merging the decoded proxies into the daemon's working config
when one is available.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import aiohttp
from tqdm.asyncio import tqdm_asyncio

from .config import Settings
from .core.file_utils import atomic_write
from .core.subscription import looks_like_full_config
from .core.synthesizer import convert_raw_subscription
from .exceptions import ClashSubError, SubscriptionError
from .fetcher import fetch_with_settings
from .profiles import SubscriptionItem, update_profile_updated_at, work_config_path_from_list


@dataclass
class UpdateResult:
    """Outcome of refreshing one subscription."""

    name: str
    success: bool
    updated_at: Optional[int] = None
    error: Optional[str] = None


def build_profile_bytes(
    payload: bytes, list_path: Path, prune_stale: bool = True
) -> bytes:
    """
    Decide what to store for a freshly downloaded subscription payload.

    Full configs and payloads that cannot be converted are returned as is;
    raw link lists are merged into the working config next to ``list_path``.
    Leaf members of rewritten groups that the payload no longer provides are
    dropped unless ``prune_stale`` is false.
    """
    if looks_like_full_config(payload):
        logging.debug("update_profile detected full config")
        return payload

    work_config = work_config_path_from_list(list_path)
    if work_config is None:
        logging.debug("update_profile raw subscription, no work config to merge into")
        return payload

    logging.debug("update_profile raw subscription, attempt convert")
    try:
        output, count = convert_raw_subscription(
            payload, work_config.read_bytes(), prune_stale=prune_stale
        )
    except (SubscriptionError, OSError) as exc:
        logging.warning("Keeping raw subscription for %s: %s", list_path, exc)
        return payload
    logging.debug("update_profile converted raw -> config, proxies=%d", count)
    return output.encode("utf-8")


async def update_profile(
    session: aiohttp.ClientSession, item: SubscriptionItem, settings: Settings
) -> int:
    """
    Download, convert and store one profile, then stamp its update time.

    Returns:
        The new ``updated`` timestamp in epoch milliseconds.
    Raises:
        ClashSubError: If the item has no URL, the download fails or the
            profile list cannot be updated.
    """
    if not item.url:
        raise ClashSubError("No URL for this subscription")

    payload = await fetch_with_settings(session, item.url, settings.network)
    logging.debug(
        "update_profile id=%s url_len=%d bytes_len=%d", item.id, len(item.url), len(payload)
    )

    final_bytes = build_profile_bytes(
        payload, item.list_path, prune_stale=settings.synthesis.prune_on_update
    )
    atomic_write(item.profile_path, final_bytes)

    updated_at = int(time.time() * 1000)
    update_profile_updated_at(item.list_path, item.id, updated_at)
    return updated_at


async def update_all(
    items: Sequence[SubscriptionItem],
    settings: Settings,
    session: Optional[aiohttp.ClientSession] = None,
) -> List[UpdateResult]:
    """Refresh every item concurrently and report one result per item."""

    async def worker(sess: aiohttp.ClientSession, item: SubscriptionItem) -> UpdateResult:
        try:
            updated_at = await update_profile(sess, item, settings)
        except (ClashSubError, OSError) as exc:
            logging.error("Failed to update %s: %s", item.name, exc)
            return UpdateResult(name=item.name, success=False, error=str(exc))
        logging.info("Updated %s", item.name)
        return UpdateResult(name=item.name, success=True, updated_at=updated_at)

    async def run(sess: aiohttp.ClientSession) -> List[UpdateResult]:
        tasks = [asyncio.create_task(worker(sess, item)) for item in items]
        if not tasks:
            return []
        return list(
            await tqdm_asyncio.gather(*tasks, total=len(tasks), desc="Updating profiles")
        )

    if session is not None:
        return await run(session)
    async with aiohttp.ClientSession() as own_session:
        return await run(own_session)
