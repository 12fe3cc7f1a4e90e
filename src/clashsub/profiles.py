"""Mihomo Party profile list (``profile.yaml``) handling.

The profile list records every subscription the GUI knows about. Each item
has an id, a display name, a type, an optional subscription URL and the time
(epoch milliseconds) of its last update. The profile itself lives in
``profiles/<id>.yaml`` next to the list, and the daemon's working config in
``work/config.yaml``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .constants import CONFIG_FILE_NAMES, PROFILES_DIR_NAME, WORK_DIR_NAME
from .core.file_utils import atomic_write
from .core.proxy_parser import parse_raw_subscription
from .core.yaml_schema import ConfigDumper, ConfigLoader
from .exceptions import ConfigError


class ProfileItem(BaseModel):
    """One entry of the profile list. Unknown keys are kept."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    name: str
    profile_type: str = Field(alias="type")
    url: Optional[str] = None
    updated: Optional[int] = None


class ProfileList(BaseModel):
    """The whole ``profile.yaml`` document. Unknown keys are kept."""

    model_config = ConfigDict(extra="allow")

    items: List[ProfileItem] = Field(default_factory=list)
    current: Optional[str] = None

    @classmethod
    def load(cls, path: Path) -> "ProfileList":
        """
        Read a profile list from disk.

        Raises:
            ConfigError: If the file cannot be read or does not match the
                expected shape.
        """
        try:
            data = yaml.load(path.read_text(encoding="utf-8"), Loader=ConfigLoader) or {}
            return cls.model_validate(data)
        except (OSError, yaml.YAMLError, ValidationError) as exc:
            raise ConfigError(f"Failed to load profile list {path}: {exc}") from exc

    def save(self, path: Path) -> None:
        data = self.model_dump(by_alias=True)
        # Optional keys absent from the file stay absent; explicit nulls survive.
        if "current" not in self.model_fields_set:
            data.pop("current", None)
        for item, dumped in zip(self.items, data.get("items", [])):
            for field in ("url", "updated"):
                if field not in item.model_fields_set:
                    dumped.pop(field, None)
        atomic_write(path, yaml.dump(data, Dumper=ConfigDumper, sort_keys=False, allow_unicode=True))

    def find(self, profile_id: str) -> Optional[ProfileItem]:
        for item in self.items:
            if item.id == profile_id:
                return item
        return None


@dataclass
class SubscriptionItem:
    """A remote profile that can be refreshed from its URL."""

    id: str
    name: str
    provider_type: str
    url: Optional[str]
    proxy_count: int
    updated_at: Optional[int]
    is_current: bool
    profile_path: Path
    list_path: Path


def profile_path_from_list(list_path: Path, profile_id: str) -> Path:
    """Return the path of the profile file with ``profile_id``."""
    return list_path.parent / PROFILES_DIR_NAME / f"{profile_id}.yaml"


def work_config_path_from_list(list_path: Path) -> Optional[Path]:
    """Return the daemon's working config next to the profile list, if present."""
    work_dir = list_path.parent / WORK_DIR_NAME
    for name in CONFIG_FILE_NAMES:
        candidate = work_dir / name
        if candidate.is_file():
            return candidate
    return None


def count_proxies_in_profile(path: Path) -> Optional[int]:
    """
    Count the entries of a profile's top-level ``proxies`` list.

    Returns:
        The number of proxies, or None if the file is unreadable, not YAML,
        or has no ``proxies`` sequence.
    """
    try:
        document = yaml.safe_load(path.read_bytes())
    except (OSError, yaml.YAMLError, UnicodeDecodeError):
        return None
    if not isinstance(document, dict):
        return None
    proxies = document.get("proxies")
    if not isinstance(proxies, list):
        return None
    return len(proxies)


def update_profile_updated_at(list_path: Path, profile_id: str, updated_at_ms: int) -> None:
    """Record ``updated_at_ms`` as the last update time of ``profile_id``."""
    profile_list = ProfileList.load(list_path)
    item = profile_list.find(profile_id)
    if item is None:
        logging.warning("Profile %s not found in %s", profile_id, list_path)
        return
    item.updated = updated_at_ms
    profile_list.save(list_path)


def _proxy_count(profile_path: Path) -> int:
    count = count_proxies_in_profile(profile_path)
    if count is not None:
        return count
    try:
        return len(parse_raw_subscription(profile_path.read_bytes()))
    except OSError:
        return 0


def load_subscriptions(list_path: Path) -> List[SubscriptionItem]:
    """
    List the remote profiles recorded in ``list_path``.

    Local profiles (items without a URL) are skipped. The proxy count falls
    back to decoding the profile as a raw subscription when it is not a
    YAML config.
    """
    profile_list = ProfileList.load(list_path)
    items: List[SubscriptionItem] = []
    for item in profile_list.items:
        if not item.url:
            continue
        profile_path = profile_path_from_list(list_path, item.id)
        proxy_count = _proxy_count(profile_path)
        if proxy_count == 0:
            logging.debug(
                "subscription '%s' proxy_count=0 path=%s", item.name, profile_path
            )
        items.append(
            SubscriptionItem(
                id=item.id,
                name=item.name,
                provider_type=f"profile/{item.profile_type}",
                url=item.url,
                proxy_count=proxy_count,
                updated_at=item.updated,
                is_current=profile_list.current == item.id,
                profile_path=profile_path,
                list_path=list_path,
            )
        )
    return items
