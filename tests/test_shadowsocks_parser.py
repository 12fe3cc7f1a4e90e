from clashsub.core.parsers.shadowsocks import ShadowsocksParser
from clashsub.core.records import ShadowsocksRecord


def test_sip002_base64_userinfo():
    """Base64 userinfo with a percent-encoded fragment name."""
    record = ShadowsocksParser(
        "ss://YWVzLTI1Ni1nY206cGFzc3dvcmQ=@example.com:8388#My%20Node"
    ).parse()
    assert isinstance(record, ShadowsocksRecord)
    assert record.name == "My Node"
    assert record.cipher == "aes-256-gcm"
    assert record.password == "password"
    assert record.server == "example.com"
    assert record.port == 8388


def test_literal_userinfo():
    record = ShadowsocksParser("ss://aes-128-gcm:p%40ss@1.2.3.4:443#n").parse()
    assert record.cipher == "aes-128-gcm"
    assert record.password == "p@ss"
    assert record.server == "1.2.3.4"
    assert record.port == 443


def test_legacy_whole_base64_form():
    record = ShadowsocksParser(
        "ss://Y2hhY2hhMjAtaWV0Zi1wb2x5MTMwNTpzM2NyM3RAZXhhbXBsZS5vcmc6ODQ0Mw==#Legacy"
    ).parse()
    assert record.name == "Legacy"
    assert record.cipher == "chacha20-ietf-poly1305"
    assert record.password == "s3cr3t"
    assert record.server == "example.org"
    assert record.port == 8443


def test_ipv6_host_and_default_name():
    record = ShadowsocksParser("ss://YWVzLTI1Ni1nY206cGFzc3dvcmQ=@[::1]:8388").parse()
    assert record.server == "::1"
    assert record.port == 8388
    assert record.name == "::1:8388"


def test_plugin_is_split_on_semicolons():
    link = (
        "ss://YWVzLTI1Ni1nY206cGFzc3dvcmQ=@example.com:8388"
        "?plugin=obfs-local%3Bobfs%3Dhttp%3Bobfs-host%3Dcdn.example.com#P"
    )
    record = ShadowsocksParser(link).parse()
    assert record.plugin == "obfs-local"
    assert record.plugin_opts == "obfs=http;obfs-host=cdn.example.com"
    proxy = record.to_clash()
    assert proxy["plugin"] == "obfs-local"
    assert proxy["plugin-opts"] == "obfs=http;obfs-host=cdn.example.com"


def test_slash_before_query_or_fragment():
    record = ShadowsocksParser(
        "ss://YWVzLTI1Ni1nY206cGFzc3dvcmQ=@example.com:8388/?plugin=obfs-local%3Bobfs%3Dhttp#N"
    ).parse()
    assert record.server == "example.com"
    assert record.port == 8388
    assert record.plugin == "obfs-local"
    assert record.plugin_opts == "obfs=http"
    assert record.name == "N"

    record = ShadowsocksParser("ss://YWVzLTI1Ni1nY206cGFzc3dvcmQ=@example.com:8388/#N").parse()
    assert record.port == 8388
    assert record.name == "N"


def test_plugin_without_options():
    record = ShadowsocksParser(
        "ss://YWVzLTI1Ni1nY206cGFzc3dvcmQ=@example.com:8388?plugin=v2ray-plugin"
    ).parse()
    assert record.plugin == "v2ray-plugin"
    assert record.plugin_opts is None
    assert "plugin-opts" not in record.to_clash()


def test_to_clash_key_order():
    record = ShadowsocksParser(
        "ss://YWVzLTI1Ni1nY206cGFzc3dvcmQ=@example.com:8388#A"
    ).parse()
    assert list(record.to_clash()) == ["name", "type", "server", "port", "cipher", "password"]
    assert record.to_clash()["type"] == "ss"


def test_invalid_links_return_none():
    assert ShadowsocksParser("ss://not-base64-at-all").parse() is None
    assert ShadowsocksParser("ss://YWVzLTI1Ni1nY206cGFzc3dvcmQ=@example.com").parse() is None
    assert ShadowsocksParser("ss://YWVzLTI1Ni1nY206cGFzc3dvcmQ=@example.com:99999").parse() is None
    assert ShadowsocksParser("ss://YWVzLTI1Ni1nY206cGFzc3dvcmQ=@:8388").parse() is None
    assert ShadowsocksParser("ss://bm9jb2xvbg==@example.com:8388").parse() is None


def test_other_scheme_is_not_matched():
    assert ShadowsocksParser("trojan://pw@example.com:443").parse() is None
