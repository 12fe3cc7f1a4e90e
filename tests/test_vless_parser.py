from clashsub.core.parsers.vless import VlessParser
from clashsub.core.records import GrpcOptions, RealityOptions, VlessRecord, WsOptions

UUID = "b831381d-6324-4d53-ad4f-8cda48b30811"


def test_reality_link():
    link = (
        f"vless://{UUID}@reality.example.com:443"
        "?type=tcp&security=reality&sni=www.microsoft.com&flow=xtls-rprx-vision"
        "&pbk=PUBKEY&sid=ab12&spx=%2F&fp=chrome&encryption=none&udp=1"
        "#Reality%20Node"
    )
    record = VlessParser(link).parse()
    assert isinstance(record, VlessRecord)
    assert record.name == "Reality Node"
    assert record.uuid == UUID
    assert record.server == "reality.example.com"
    assert record.port == 443
    assert record.network == "tcp"
    assert record.flow == "xtls-rprx-vision"
    assert record.encryption == "none"
    assert record.udp is True
    assert record.tls is True
    assert record.servername == "www.microsoft.com"
    assert record.reality == RealityOptions(
        public_key="PUBKEY", short_id="ab12", spider_x="/", fingerprint="chrome"
    )

    proxy = record.to_clash()
    assert proxy["reality-opts"] == {
        "public-key": "PUBKEY",
        "short-id": "ab12",
        "spider-x": "/",
        "fingerprint": "chrome",
    }
    assert proxy["type"] == "vless"


def test_reality_long_aliases():
    link = f"vless://{UUID}@h.example:443?security=reality&public-key=K&short-id=S&spider-x=X"
    record = VlessParser(link).parse()
    assert record.reality == RealityOptions(public_key="K", short_id="S", spider_x="X")


def test_reality_only_when_security_is_reality():
    record = VlessParser(f"vless://{UUID}@h.example:443?security=tls&pbk=K").parse()
    assert record.reality is None
    assert record.tls is True


def test_defaults():
    record = VlessParser(f"vless://{UUID}@h.example:8443").parse()
    assert record.name == "h.example:8443"
    assert record.tls is False
    assert record.udp is False
    assert record.network is None
    assert record.transport is None
    assert record.to_clash() == {
        "name": "h.example:8443",
        "type": "vless",
        "server": "h.example",
        "port": 8443,
        "uuid": UUID,
        "udp": False,
    }


def test_ws_transport_and_peer_alias():
    link = f"vless://{UUID}@h.example:443?network=ws&path=%2Fws&host=cdn.example&peer=p.example&alpn=h2,http/1.1"
    record = VlessParser(link).parse()
    assert record.network == "ws"
    assert record.transport == WsOptions(path="/ws", host="cdn.example")
    assert record.servername == "p.example"
    assert record.alpn == ("h2", "http/1.1")


def test_grpc_service_name_aliases():
    record = VlessParser(f"vless://{UUID}@h.example:443?type=grpc&serviceName=grpc-svc").parse()
    assert record.transport == GrpcOptions(service_name="grpc-svc")
    record = VlessParser(f"vless://{UUID}@h.example:443?type=grpc&path=from-path").parse()
    assert record.transport == GrpcOptions(service_name="from-path")


def test_unrecognised_udp_value_is_false():
    record = VlessParser(f"vless://{UUID}@h.example:443?udp=maybe").parse()
    assert record.udp is False


def test_invalid_links_return_none():
    assert VlessParser("vless://@h.example:443").parse() is None
    assert VlessParser(f"vless://{UUID}@h.example").parse() is None
    assert VlessParser(f"vless://{UUID}@h.example:abc").parse() is None
    assert VlessParser(f"vless://{UUID}").parse() is None
