"""Configuration loading utilities for clashsub.

Settings are read from a YAML file in addition to pydantic's environment
variable and dotenv support. ``YamlConfigSettingsSource`` plugs the YAML file
into ``Settings.settings_customise_sources`` and ``load_config`` picks the
file to read.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Type

import yaml
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from ..constants import SETTINGS_FILE


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """
    A Pydantic settings source that loads variables from a YAML file.

    A missing, unreadable or malformed file contributes no values.
    """

    def __init__(self, settings_cls: Type[BaseSettings], yaml_file: Path | None):
        super().__init__(settings_cls)
        self.yaml_file = yaml_file
        self._data: dict[str, Any] = {}
        if self.yaml_file and self.yaml_file.exists():
            try:
                loaded = yaml.safe_load(self.yaml_file.read_text(encoding="utf-8"))
            except (yaml.YAMLError, OSError) as exc:
                logging.warning("Ignoring unreadable settings file %s: %s", self.yaml_file, exc)
                loaded = None
            if isinstance(loaded, dict):
                self._data = loaded

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str] | None:
        if not self._data:
            return None
        return (self._data.get(field_name), field_name)

    def __call__(self) -> dict[str, Any]:
        return dict(self._data)


def load_config(path: Path | None = None) -> "Settings":
    """
    Load application settings from a YAML file and environment variables.

    Args:
        path: The settings file. Defaults to ``~/.config/clashsub/settings.yaml``
            when that file exists.
    """
    from . import Settings

    config_file = path
    if config_file is None and SETTINGS_FILE.exists():
        config_file = SETTINGS_FILE
    return Settings(config_file=config_file)
