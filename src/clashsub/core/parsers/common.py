from __future__ import annotations

import base64
import binascii
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple
from urllib.parse import parse_qsl, unquote

from ..records import GrpcOptions, ProxyRecord, Transport, WsOptions

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def decode_base64(value: str) -> Optional[bytes]:
    """
    Decode standard or URL-safe base64, tolerating whitespace and missing padding.

    Returns:
        The decoded bytes, or None if the input is not valid base64.
    """
    normalized = "".join(value.split())
    normalized = normalized.replace("-", "+").replace("_", "/")
    normalized += "=" * (-len(normalized) % 4)
    try:
        return base64.b64decode(normalized, validate=True)
    except (binascii.Error, ValueError):
        return None


def decode_base64_text(value: str) -> Optional[str]:
    """Decode base64 into UTF-8 text, or None if either step fails."""
    decoded = decode_base64(value)
    if decoded is None:
        return None
    try:
        return decoded.decode("utf-8")
    except UnicodeDecodeError:
        return None


def percent_decode(value: str) -> str:
    """Percent-decode a URI component, replacing invalid UTF-8 sequences."""
    return unquote(value, errors="replace")


def parse_bool(value: Optional[str]) -> Optional[bool]:
    """
    Parse a boolean-like query value.

    Returns:
        True or False for recognised spellings, None for anything else.
    """
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return None


def split_list(value: Optional[str]) -> Tuple[str, ...]:
    """Split a comma-separated value such as ``alpn`` into trimmed items."""
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(",") if item.strip())


def split_host_port(hostport: str) -> Optional[Tuple[str, int]]:
    """
    Split ``host:port`` or ``[v6-literal]:port``.

    Returns:
        A ``(host, port)`` tuple with brackets removed from IPv6 hosts, or None
        if the port is missing or not a 16-bit unsigned integer.
    """
    if hostport.startswith("["):
        end = hostport.find("]")
        if end == -1 or hostport[end + 1 : end + 2] != ":":
            return None
        host, port_str = hostport[1:end], hostport[end + 2 :]
    else:
        host, sep, port_str = hostport.rpartition(":")
        if not sep:
            return None
    if not host or not port_str.isdigit():
        return None
    port = int(port_str)
    if port > 0xFFFF:
        return None
    return host, port


def query_params(query: str) -> Dict[str, str]:
    """Parse a URL query string; the last occurrence of a key wins."""
    return dict(parse_qsl(query, keep_blank_values=True))


def first_param(params: Dict[str, str], *aliases: str) -> Optional[str]:
    """Return the value of the first alias present in ``params``."""
    for alias in aliases:
        if alias in params:
            return params[alias]
    return None


def transport_from_params(
    network: Optional[str], params: Dict[str, str], *service_aliases: str
) -> Transport:
    """Build websocket or gRPC options from query parameters."""
    if network == "ws":
        return WsOptions(path=params.get("path"), host=params.get("host"))
    if network == "grpc":
        return GrpcOptions(service_name=first_param(params, *service_aliases))
    return None


class BaseParser(ABC):
    """Abstract base class for all share-link decoders.

    Subclasses implement ``decode`` and may raise ``ValueError`` (or return
    None) for any structural violation; ``parse`` turns both into None so that
    callers never receive a partial record.
    """

    scheme: str = ""

    def __init__(self, config_uri: str):
        self.config_uri = config_uri.strip()

    def matches(self) -> bool:
        return self.config_uri.lower().startswith(f"{self.scheme}://")

    @abstractmethod
    def decode(self) -> Optional[ProxyRecord]:
        """Decode the link into a record."""
        raise NotImplementedError

    def parse(self) -> Optional[ProxyRecord]:
        if not self.matches():
            return None
        try:
            return self.decode()
        except (ValueError, UnicodeDecodeError) as exc:
            logging.debug("Dropping malformed %s link: %s", self.scheme, exc)
            return None

    @staticmethod
    def default_name(server: str, port: int) -> str:
        return f"{server}:{port}"
