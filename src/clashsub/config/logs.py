from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator

from .base import BaseConfig


class LoggingSettings(BaseConfig):
    """Settings for log output."""

    level: str = Field("INFO", description="Root log level.")
    log_file: Optional[Path] = Field(
        None, description="Also write logs to this file."
    )
    mask_sensitive: bool = Field(
        True, description="Mask credentials and e-mail addresses in log messages."
    )

    @field_validator("level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"):
            raise ValueError(f"Unknown log level: {value}")
        return level
