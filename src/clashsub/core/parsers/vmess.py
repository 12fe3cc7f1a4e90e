from __future__ import annotations

import json
from typing import Any, Dict, Optional

from ..records import GrpcOptions, VmessRecord, WsOptions
from .common import BaseParser, decode_base64, split_list


class VmessParser(BaseParser):
    """
    Parses a VMess share link.

    The payload after ``vmess://`` is base64-encoded JSON in the v2rayN
    format (``add``, ``port``, ``id``, ``ps``, ``aid``, ``scy``, ``net``,
    ``tls``, ``sni``, ``host``, ``path``, ``alpn``).
    """

    scheme = "vmess"

    def decode(self) -> Optional[VmessRecord]:
        payload = self.config_uri[len("vmess://") :].split("#", 1)[0]
        raw = decode_base64(payload)
        if raw is None:
            return None
        try:
            data = json.loads(raw.decode("utf-8"))
        except json.JSONDecodeError:
            return None
        if not isinstance(data, dict):
            return None

        server = self._get_str(data, "add")
        port_str = self._get_str(data, "port")
        uuid = self._get_str(data, "id")
        if not server or not uuid or port_str is None:
            return None
        port = int(port_str)

        alter_id = self._get_str(data, "aid")
        cipher = self._get_str(data, "scy") or "auto"
        network = self._get_str(data, "net") or self._get_str(data, "network")
        tls = self._get_str(data, "tls")
        host = self._get_str(data, "host")
        path = self._get_str(data, "path")
        sni = self._get_str(data, "sni")
        if sni is None:
            sni = host

        transport = None
        if network == "ws":
            transport = WsOptions(path=path, host=host)
        elif network == "grpc":
            transport = GrpcOptions(service_name=path)

        return VmessRecord(
            name=self._get_str(data, "ps") or self.default_name(server, port),
            server=server,
            port=port,
            uuid=uuid,
            cipher=cipher,
            alter_id=int(alter_id) if alter_id and alter_id.isdigit() else None,
            network=network or None,
            tls=bool(tls) and tls != "none",
            servername=sni,
            alpn=split_list(self._get_str(data, "alpn")),
            transport=transport,
        )

    @staticmethod
    def _get_str(data: Dict[str, Any], key: str) -> Optional[str]:
        """Read a JSON field that may be encoded as a string or a number."""
        value = data.get(key)
        if isinstance(value, bool):
            return "true" if value else None
        if isinstance(value, (int, float)):
            return str(value)
        if isinstance(value, str):
            return value
        return None
