"""Protocol-specific decoders for proxy share links.

Each module provides a ``BaseParser`` subclass that turns one share link into
a typed ``ProxyRecord`` (see ``clashsub.core.records``) or None when the link
is structurally invalid. Decoders never raise to their callers.
"""
from __future__ import annotations

from .shadowsocks import ShadowsocksParser
from .trojan import TrojanParser
from .vless import VlessParser
from .vmess import VmessParser

__all__ = ["ShadowsocksParser", "VmessParser", "VlessParser", "TrojanParser"]
