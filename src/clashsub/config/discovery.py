from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field

from ..constants import MAX_SCAN_DEPTH
from .base import BaseConfig


class DiscoverySettings(BaseConfig):
    """Settings for locating the daemon config and the profile list."""

    clash_config_path: Optional[Path] = Field(
        None,
        description="Known location of the daemon config, used as a hint for discovery.",
    )
    max_scan_depth: int = Field(
        MAX_SCAN_DEPTH,
        ge=0,
        description="How many directory levels below each scan root are searched.",
    )
