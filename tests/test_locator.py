from pathlib import Path

from clashsub.core.locator import (
    DiscoveryEnv,
    PathLocator,
    find_config,
    find_profile_list,
    has_tool_name,
    is_daemon_config,
)

CONFIG = {"mixed-port": 7890, "proxies": []}
NOT_A_CONFIG = {"name": "some other app", "version": 3}


def test_env_config_path_overrides_everything(fs, discovery_env):
    fs.create_yaml(".config/mihomo/config.yaml", CONFIG, mtime=2_000_000_000)
    pinned = fs.create_yaml("elsewhere/my.yaml", CONFIG, mtime=1_000_000_000)
    env = DiscoveryEnv(home=fs.root, config_path=pinned, system_dirs=())
    assert PathLocator(env).locate_config() == pinned


def test_env_party_dir_override(fs):
    party = fs.root / "portable" / "party"
    expected = fs.create_yaml("portable/party/work/config.yaml", CONFIG)
    env = DiscoveryEnv(home=fs.root, party_dir=party, system_dirs=())
    assert PathLocator(env).locate_config() == expected


def test_hint_file_is_used_directly(fs, discovery_env):
    hint = fs.create_file("anywhere/custom.yml", "not: checked\n")
    assert PathLocator(discovery_env).locate_config(hint) == hint


def test_hint_directory_containing_config(fs, discovery_env):
    expected = fs.create_yaml("work-dir/config.yml", CONFIG)
    assert PathLocator(discovery_env).locate_config(fs.root / "work-dir") == expected


def test_hint_inside_tool_directory_checks_ancestors(fs, discovery_env):
    expected = fs.create_yaml("data/mihomo-party/work/config.yaml", CONFIG)
    hint = fs.root / "data" / "mihomo-party" / "profiles"
    hint.mkdir(parents=True)
    assert PathLocator(discovery_env).locate_config(hint) == expected


def test_hint_directory_falls_back_to_scoped_scan(fs, discovery_env):
    fs.create_yaml("scoped/a/config.yaml", CONFIG, mtime=1_000_000_000)
    newer = fs.create_yaml("scoped/b/config.yaml", CONFIG, mtime=1_500_000_000)
    fs.create_yaml("scoped/c/config.yaml", NOT_A_CONFIG, mtime=1_900_000_000)
    assert PathLocator(discovery_env).locate_config(fs.root / "scoped") == newer


def test_well_known_location_requires_marker_keys(fs, discovery_env):
    fs.create_yaml(".config/clash/config.yaml", NOT_A_CONFIG)
    assert PathLocator(discovery_env).locate_config() is None

    expected = fs.create_yaml(".config/mihomo/config.yaml", CONFIG)
    assert PathLocator(discovery_env).locate_config() == expected


def test_newest_well_known_candidate_wins(fs, discovery_env):
    fs.create_yaml(".config/clash/config.yaml", CONFIG, mtime=1_000_000_000)
    newer = fs.create_yaml(
        "Library/Application Support/mihomo-party/work/config.yaml", CONFIG, mtime=1_700_000_000
    )
    assert PathLocator(discovery_env).locate_config() == newer


def test_scan_returns_most_recently_modified(fs, discovery_env):
    fs.create_yaml(".config/clash-meta-alpha/config.yaml", CONFIG, mtime=1_000_000_000)
    newer = fs.create_yaml(".config/mihomo-backup/old/config.yaml", CONFIG, mtime=1_600_000_000)
    assert PathLocator(discovery_env).locate_config() == newer


def test_scan_requires_tool_name_in_path(fs, discovery_env):
    fs.create_yaml(".config/otherapp/config.yaml", CONFIG)
    assert PathLocator(discovery_env).locate_config() is None


def test_scan_skips_heavy_directories(fs, discovery_env):
    fs.create_yaml(".config/clash-dev/node_modules/config.yaml", CONFIG)
    fs.create_yaml(".config/clash-dev/.git/config.yaml", CONFIG)
    fs.create_yaml(".config/clash-dev/cache/config.yaml", CONFIG)
    assert PathLocator(discovery_env).locate_config() is None


def test_scan_depth_is_bounded(fs, discovery_env):
    fs.create_yaml(".config/clash-dev/a/b/c/config.yaml", CONFIG)
    assert PathLocator(discovery_env).locate_config() is None

    within = fs.create_yaml(".config/clash-dev/a/b/config.yaml", CONFIG)
    assert PathLocator(discovery_env).locate_config() == within


def test_system_dirs_only_when_unhinted(fs, tmp_path):
    etc_clash = tmp_path / "etc" / "clash"
    etc_clash.mkdir(parents=True)
    expected = etc_clash / "config.yaml"
    expected.write_text("external-controller: 127.0.0.1:9090\n")
    env = DiscoveryEnv(home=fs.root, system_dirs=(etc_clash,))

    assert PathLocator(env).locate_config() == expected

    empty_hint = fs.root / "empty"
    empty_hint.mkdir()
    assert PathLocator(env).locate_config(empty_hint) is None


def test_nothing_found_returns_none(discovery_env):
    assert PathLocator(discovery_env).locate_config() is None
    assert PathLocator(discovery_env).locate_profile_list() is None
    assert PathLocator(DiscoveryEnv(home=None, system_dirs=())).locate_config() is None


def test_profile_list_well_known(fs, discovery_env):
    expected = fs.create_yaml(".config/mihomo-party/profile.yaml", {"items": []})
    assert PathLocator(discovery_env).locate_profile_list() == expected


def test_profile_list_from_config_hint(fs, discovery_env):
    expected = fs.create_yaml("apps/mihomo-party/profile.yaml", {"items": []})
    config = fs.create_yaml("apps/mihomo-party/work/config.yaml", CONFIG)
    assert PathLocator(discovery_env).locate_profile_list(config) == expected


def test_profile_list_only_needs_to_parse(fs, discovery_env):
    fs.create_file(".config/mihomo-party/profile.yaml", "items: [unterminated\n")
    assert PathLocator(discovery_env).locate_profile_list() is None


def test_profile_list_party_dir_override(fs):
    expected = fs.create_yaml("portable/profile.yaml", {"items": []})
    env = DiscoveryEnv(home=fs.root, party_dir=fs.root / "portable", system_dirs=())
    assert find_profile_list(env=env) == expected


def test_find_config_uses_given_env(fs, discovery_env):
    expected = fs.create_yaml(".config/clash.meta/config.yaml", CONFIG)
    assert find_config(env=discovery_env) == expected


def test_from_environ():
    env = DiscoveryEnv.from_environ(
        {"CLASH_CONFIG_PATH": "/opt/clash/config.yaml", "CLASH_PARTY_DIR": "  "}
    )
    assert env.config_path == Path("/opt/clash/config.yaml")
    assert env.party_dir is None


def test_content_and_name_heuristics(fs):
    assert is_daemon_config(fs.create_yaml("a.yaml", {"proxy-providers": {}}))
    assert not is_daemon_config(fs.create_yaml("b.yaml", ["proxies"]))
    assert not is_daemon_config(fs.create_file("c.yaml", "proxies: [\n"))
    assert has_tool_name(Path("Clash Verge/config.yaml"))
    assert not has_tool_name(Path("other/config.yaml"))
