"""Subscription ingestion and config synthesis for Clash/Mihomo clients."""

from __future__ import annotations

from .core.locator import DiscoveryEnv, PathLocator, find_config, find_profile_list
from .core.proxy_parser import ProxyParser, parse_link, parse_raw_subscription
from .core.subscription import extract_subscription_lines, looks_like_full_config
from .core.synthesizer import apply_proxies_to_config, convert_raw_subscription

__version__ = "0.1.0"

__all__ = [
    "DiscoveryEnv",
    "PathLocator",
    "find_config",
    "find_profile_list",
    "ProxyParser",
    "parse_link",
    "parse_raw_subscription",
    "extract_subscription_lines",
    "looks_like_full_config",
    "apply_proxies_to_config",
    "convert_raw_subscription",
]
