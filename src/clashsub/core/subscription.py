"""Subscription payload handling.

A subscription URL answers either with a complete daemon configuration
(YAML) or with a list of share links, optionally wrapped in base64. This
module tells the two apart and splits link lists into candidate lines.
"""
from __future__ import annotations

import logging
from typing import List, Union

import yaml

from ..constants import FULL_CONFIG_KEYS
from .parsers.common import decode_base64_text

LINK_MARKER = "://"


def extract_subscription_lines(payload: Union[bytes, str]) -> List[str]:
    """
    Split a subscription payload into candidate share-link lines.

    The payload is decoded as UTF-8 (invalid sequences replaced). When it
    contains no ``://`` it is tried as base64 (URL-safe alphabet and missing
    padding tolerated). Lines are trimmed and empty lines dropped.

    Args:
        payload: The raw subscription bytes or already-decoded text.

    Returns:
        The candidate lines in payload order. Empty when neither the payload
        nor its base64 decoding contains any share link.
    """
    if isinstance(payload, bytes):
        text = payload.decode("utf-8", errors="replace").strip()
    else:
        text = payload.strip()

    if LINK_MARKER not in text:
        decoded = decode_base64_text(text)
        if decoded is None or LINK_MARKER not in decoded:
            logging.debug("Subscription payload contains no share links")
            return []
        text = decoded

    return [line.strip() for line in text.splitlines() if line.strip()]


def looks_like_full_config(payload: Union[bytes, str]) -> bool:
    """
    Return True if the payload is a YAML mapping with a daemon config key.

    Any of ``proxies``, ``proxy-providers``, ``proxy-groups``, ``rules`` or
    ``rule-providers`` at the top level qualifies. Unparsable payloads are
    reported as not being a full config.
    """
    try:
        document = yaml.safe_load(payload)
    except (yaml.YAMLError, UnicodeDecodeError) as exc:
        logging.debug("Payload is not valid YAML: %s", exc)
        return False
    if not isinstance(document, dict):
        return False
    return any(key in document for key in FULL_CONFIG_KEYS)
