"""Typed proxy records produced by the share-link decoders.

Each supported protocol has its own frozen dataclass. All of them share the
``name``/``server``/``port`` triple and know how to serialize themselves into
the mapping shape used by a Clash/Mihomo ``proxies`` entry via ``to_clash()``.
The key order of that mapping is fixed per protocol so that synthesized
documents are stable across runs.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class WsOptions:
    """Websocket transport options."""

    path: Optional[str] = None
    host: Optional[str] = None

    def to_clash(self) -> Dict[str, Any]:
        opts: Dict[str, Any] = {}
        if self.path is not None:
            opts["path"] = self.path
        if self.host is not None:
            opts["headers"] = {"Host": self.host}
        return opts


@dataclass(frozen=True)
class GrpcOptions:
    """gRPC transport options."""

    service_name: Optional[str] = None

    def to_clash(self) -> Dict[str, Any]:
        if self.service_name is None:
            return {}
        return {"grpc-service-name": self.service_name}


@dataclass(frozen=True)
class RealityOptions:
    """REALITY handshake options for VLESS."""

    public_key: Optional[str] = None
    short_id: Optional[str] = None
    spider_x: Optional[str] = None
    fingerprint: Optional[str] = None

    def to_clash(self) -> Dict[str, Any]:
        opts: Dict[str, Any] = {}
        if self.public_key is not None:
            opts["public-key"] = self.public_key
        if self.short_id is not None:
            opts["short-id"] = self.short_id
        if self.spider_x is not None:
            opts["spider-x"] = self.spider_x
        if self.fingerprint is not None:
            opts["fingerprint"] = self.fingerprint
        return opts


Transport = Union[WsOptions, GrpcOptions, None]


def _transport_to_clash(proxy: Dict[str, Any], transport: Transport) -> None:
    if transport is None:
        return
    opts = transport.to_clash()
    if not opts:
        return
    key = "ws-opts" if isinstance(transport, WsOptions) else "grpc-opts"
    proxy[key] = opts


@dataclass(frozen=True)
class ProxyRecord:
    """Fields common to every decoded proxy.

    Raises:
        ValueError: If ``name`` or ``server`` is empty or ``port`` is not a
            16-bit unsigned value.
    """

    kind: ClassVar[str] = ""

    name: str
    server: str
    port: int

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("proxy name must not be empty")
        if not self.server:
            raise ValueError("proxy server must not be empty")
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ValueError(f"invalid port: {self.port!r}")
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError(f"port out of range: {self.port}")

    def _head(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.kind,
            "server": self.server,
            "port": self.port,
        }

    def to_clash(self) -> Dict[str, Any]:
        raise NotImplementedError


@dataclass(frozen=True)
class ShadowsocksRecord(ProxyRecord):
    kind: ClassVar[str] = "ss"

    cipher: str = ""
    password: str = ""
    plugin: Optional[str] = None
    plugin_opts: Optional[str] = None

    def to_clash(self) -> Dict[str, Any]:
        proxy = self._head()
        proxy["cipher"] = self.cipher
        proxy["password"] = self.password
        if self.plugin is not None:
            proxy["plugin"] = self.plugin
        if self.plugin_opts is not None:
            proxy["plugin-opts"] = self.plugin_opts
        return proxy


@dataclass(frozen=True)
class VmessRecord(ProxyRecord):
    kind: ClassVar[str] = "vmess"

    uuid: str = ""
    cipher: str = "auto"
    alter_id: Optional[int] = None
    network: Optional[str] = None
    tls: bool = False
    servername: Optional[str] = None
    alpn: Tuple[str, ...] = ()
    transport: Transport = None

    def to_clash(self) -> Dict[str, Any]:
        proxy = self._head()
        proxy["uuid"] = self.uuid
        proxy["cipher"] = self.cipher
        if self.alter_id is not None:
            proxy["alterId"] = self.alter_id
        if self.network:
            proxy["network"] = self.network
        if self.tls:
            proxy["tls"] = True
        if self.servername is not None:
            proxy["servername"] = self.servername
        if self.alpn:
            proxy["alpn"] = list(self.alpn)
        _transport_to_clash(proxy, self.transport)
        return proxy


@dataclass(frozen=True)
class VlessRecord(ProxyRecord):
    kind: ClassVar[str] = "vless"

    uuid: str = ""
    udp: bool = False
    network: Optional[str] = None
    flow: Optional[str] = None
    encryption: Optional[str] = None
    tls: bool = False
    servername: Optional[str] = None
    alpn: Tuple[str, ...] = ()
    reality: Optional[RealityOptions] = None
    transport: Transport = None

    def to_clash(self) -> Dict[str, Any]:
        proxy = self._head()
        proxy["uuid"] = self.uuid
        proxy["udp"] = self.udp
        if self.network:
            proxy["network"] = self.network
        if self.flow is not None:
            proxy["flow"] = self.flow
        if self.encryption is not None:
            proxy["encryption"] = self.encryption
        if self.tls:
            proxy["tls"] = True
        if self.servername is not None:
            proxy["servername"] = self.servername
        if self.alpn:
            proxy["alpn"] = list(self.alpn)
        if self.reality is not None:
            reality_opts = self.reality.to_clash()
            if reality_opts:
                proxy["reality-opts"] = reality_opts
        _transport_to_clash(proxy, self.transport)
        return proxy


@dataclass(frozen=True)
class TrojanRecord(ProxyRecord):
    kind: ClassVar[str] = "trojan"

    password: str = ""
    udp: bool = False
    skip_cert_verify: bool = False
    network: Optional[str] = None
    sni: Optional[str] = None
    alpn: Tuple[str, ...] = ()
    transport: Transport = None

    def to_clash(self) -> Dict[str, Any]:
        proxy = self._head()
        proxy["password"] = self.password
        proxy["udp"] = self.udp
        if self.skip_cert_verify:
            proxy["skip-cert-verify"] = True
        if self.network:
            proxy["network"] = self.network
        if self.sni is not None:
            proxy["sni"] = self.sni
        if self.alpn:
            proxy["alpn"] = list(self.alpn)
        _transport_to_clash(proxy, self.transport)
        return proxy
