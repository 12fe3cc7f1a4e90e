from __future__ import annotations

from typing import Dict, Optional
from urllib.parse import urlsplit

from ..records import RealityOptions, VlessRecord
from .common import (
    BaseParser,
    first_param,
    parse_bool,
    percent_decode,
    query_params,
    split_host_port,
    split_list,
    transport_from_params,
)


class VlessParser(BaseParser):
    """
    Parses a VLESS share link (``vless://uuid@host:port?params#name``).

    Aliased query parameters are resolved in a fixed order: the first name
    listed for a field wins when several are present.
    """

    scheme = "vless"

    def _parse_reality_opts(self, params: Dict[str, str]) -> RealityOptions:
        """Helper to build the reality-opts record."""
        return RealityOptions(
            public_key=first_param(params, "pbk", "public-key"),
            short_id=first_param(params, "sid", "short-id"),
            spider_x=first_param(params, "spx", "spider-x"),
            fingerprint=params.get("fp"),
        )

    def decode(self) -> Optional[VlessRecord]:
        p = urlsplit(self.config_uri)
        userinfo, at, hostport = p.netloc.rpartition("@")
        uuid = percent_decode(userinfo.partition(":")[0]) if at else ""
        if not uuid:
            return None
        host_port = split_host_port(hostport)
        if host_port is None:
            return None
        server, port = host_port

        params = query_params(p.query)
        network = first_param(params, "type", "network")
        security = params.get("security", "none")
        reality = None
        if security == "reality":
            reality = self._parse_reality_opts(params)

        return VlessRecord(
            name=percent_decode(p.fragment) or self.default_name(server, port),
            server=server,
            port=port,
            uuid=uuid,
            udp=bool(parse_bool(params.get("udp"))),
            network=network or None,
            flow=params.get("flow"),
            encryption=params.get("encryption"),
            tls=security not in ("", "none"),
            servername=first_param(params, "sni", "peer"),
            alpn=split_list(params.get("alpn")),
            reality=reality,
            transport=transport_from_params(
                network, params, "serviceName", "service", "path"
            ),
        )
