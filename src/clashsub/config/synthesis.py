from __future__ import annotations

from pydantic import Field

from .base import BaseConfig


class SynthesisSettings(BaseConfig):
    """Settings for merging decoded proxies into a base config."""

    prune_stale_members: bool = Field(
        False,
        description=(
            "Drop existing leaf proxies from rewritten proxy-groups instead of "
            "keeping them ahead of the newly installed ones."
        ),
    )
    prune_on_update: bool = Field(
        True,
        description=(
            "Drop leaf proxies that the refreshed subscription no longer provides "
            "when a profile is updated, so no group points at a missing proxy."
        ),
    )
