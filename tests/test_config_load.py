from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from clashsub.config import Settings, load_config


def test_load_defaults(tmp_path):
    """Test that default settings are loaded correctly."""
    p = tmp_path / "settings.yaml"
    p.write_text("{}")
    loaded = load_config(p)
    assert loaded.discovery.clash_config_path is None
    assert loaded.discovery.max_scan_depth == 3
    assert loaded.network.request_timeout == 10
    assert loaded.network.headers["User-Agent"] == "clash.meta"
    assert loaded.synthesis.prune_stale_members is False
    assert loaded.synthesis.prune_on_update is True
    assert loaded.logging.level == "INFO"


def test_load_custom_values(tmp_path):
    """Test that custom values from a YAML file override defaults."""
    p = tmp_path / "settings.yaml"
    p.write_text(
        yaml.safe_dump(
            {
                "discovery": {"clash_config_path": "/opt/clash/config.yaml", "max_scan_depth": 1},
                "network": {"retry_attempts": 5, "http_proxy": "http://127.0.0.1:7890"},
                "synthesis": {"prune_stale_members": True},
                "logging": {"level": "debug"},
            }
        )
    )
    loaded = load_config(p)
    assert loaded.discovery.clash_config_path == Path("/opt/clash/config.yaml")
    assert loaded.discovery.max_scan_depth == 1
    assert loaded.network.retry_attempts == 5
    assert loaded.network.http_proxy == "http://127.0.0.1:7890"
    assert loaded.synthesis.prune_stale_members is True
    assert loaded.logging.level == "DEBUG"


def test_load_invalid_yaml_uses_defaults(tmp_path):
    """Test that an invalid YAML file results in default settings."""
    p = tmp_path / "bad.yaml"
    p.write_text("network: [unterminated\n")
    settings = load_config(p)
    assert settings.network.retry_attempts == 3


def test_file_not_found_uses_defaults(tmp_path):
    """Test that a missing settings file results in default settings."""
    settings = load_config(tmp_path / "missing.yaml")
    assert settings.discovery.max_scan_depth == 3


def test_env_overrides_file(tmp_path, monkeypatch):
    p = tmp_path / "settings.yaml"
    p.write_text(yaml.safe_dump({"network": {"request_timeout": 30}}))
    monkeypatch.setenv("NETWORK__REQUEST_TIMEOUT", "5")
    assert load_config(p).network.request_timeout == 5


def test_unknown_keys_are_rejected(tmp_path):
    p = tmp_path / "settings.yaml"
    p.write_text(yaml.safe_dump({"network": {"no_such_option": 1}}))
    with pytest.raises(ValidationError):
        load_config(p)


def test_invalid_log_level_is_rejected():
    settings = Settings()
    with pytest.raises(ValidationError):
        settings.logging.level = "chatty"
