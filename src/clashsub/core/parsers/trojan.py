from __future__ import annotations

from typing import Optional
from urllib.parse import urlsplit

from ..records import TrojanRecord
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


class TrojanParser(BaseParser):
    """
    Parses a Trojan share link (``trojan://password@host:port?params#name``).
    """

    scheme = "trojan"

    def decode(self) -> Optional[TrojanRecord]:
        p = urlsplit(self.config_uri)
        userinfo, at, hostport = p.netloc.rpartition("@")
        password = percent_decode(userinfo) if at else ""
        if not password:
            return None
        host_port = split_host_port(hostport)
        if host_port is None:
            return None
        server, port = host_port

        params = query_params(p.query)
        network = first_param(params, "type", "network")
        skip_cert = parse_bool(first_param(params, "allowInsecure", "skip-cert-verify"))

        return TrojanRecord(
            name=percent_decode(p.fragment) or self.default_name(server, port),
            server=server,
            port=port,
            password=password,
            udp=bool(parse_bool(params.get("udp"))),
            skip_cert_verify=bool(skip_cert),
            network=network or None,
            sni=first_param(params, "sni", "peer"),
            alpn=split_list(params.get("alpn")),
            transport=transport_from_params(
                network, params, "serviceName", "service", "path"
            ),
        )
