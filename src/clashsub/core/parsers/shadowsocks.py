from __future__ import annotations

from typing import Optional, Tuple

from ..records import ShadowsocksRecord
from .common import (
    BaseParser,
    decode_base64_text,
    percent_decode,
    query_params,
    split_host_port,
)


class ShadowsocksParser(BaseParser):
    """
    Parses a Shadowsocks (SS) share link.

    Both SIP002 links (``ss://userinfo@host:port``, userinfo either literal
    ``method:password`` or base64) and legacy links where the whole
    ``method:password@host:port`` part is base64-encoded are supported.
    """

    scheme = "ss"

    def decode(self) -> Optional[ShadowsocksRecord]:
        content = self.config_uri[len("ss://") :]

        name = None
        content, hash_sep, fragment = content.partition("#")
        if hash_sep:
            name = percent_decode(fragment)

        plugin, plugin_opts = None, None
        content, q_sep, query = content.partition("?")
        if q_sep:
            plugin, plugin_opts = self._parse_plugin(query)

        split = self._split_userinfo(content)
        if split is None:
            return None
        userinfo, hostport = split

        credentials = self._parse_credentials(userinfo)
        if credentials is None:
            return None
        cipher, password = credentials

        host_port = split_host_port(hostport)
        if host_port is None:
            return None
        server, port = host_port

        return ShadowsocksRecord(
            name=name or self.default_name(server, port),
            server=server,
            port=port,
            cipher=cipher,
            password=password,
            plugin=plugin,
            plugin_opts=plugin_opts,
        )

    @staticmethod
    def _parse_plugin(query: str) -> Tuple[Optional[str], Optional[str]]:
        """Split ``plugin=name;opt1;opt2`` into the plugin name and its options."""
        value = query_params(query).get("plugin")
        if value is None:
            return None, None
        first, _, rest = value.partition(";")
        plugin = first or None
        plugin_opts = rest if ";" in value else None
        return plugin, plugin_opts

    @staticmethod
    def _split_userinfo(content: str) -> Optional[Tuple[str, str]]:
        if "@" in content:
            userinfo, _, hostport = content.rpartition("@")
            if hostport.endswith("/"):
                hostport = hostport[:-1]
            return userinfo, hostport
        # Legacy form: base64("method:password@host:port")
        decoded = decode_base64_text(content)
        if decoded is None or "@" not in decoded:
            return None
        userinfo, _, hostport = decoded.rpartition("@")
        return userinfo, hostport.strip()

    @staticmethod
    def _parse_credentials(userinfo: str) -> Optional[Tuple[str, str]]:
        if ":" in userinfo:
            plain = percent_decode(userinfo)
        else:
            plain = decode_base64_text(percent_decode(userinfo))
            if plain is None or ":" not in plain:
                return None
        cipher, _, password = plain.partition(":")
        if not cipher:
            return None
        return cipher, password
