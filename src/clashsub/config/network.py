from __future__ import annotations

from typing import Dict, Optional

from pydantic import Field

from .base import BaseConfig


class NetworkSettings(BaseConfig):
    """Settings related to subscription downloads."""

    request_timeout: int = Field(10, description="Timeout for subscription requests in seconds.")
    retry_attempts: int = Field(
        3, ge=1, description="Number of attempts for failed subscription requests."
    )
    retry_base_delay: float = Field(
        1.0, description="Base delay for exponential backoff between retries."
    )
    retry_jitter: float = Field(
        0.5, description="Amount of random jitter to apply to retry delays (0 to 1)."
    )
    http_proxy: Optional[str] = Field(
        None, description="URL of an HTTP proxy for downloads (e.g., 'http://127.0.0.1:7890')."
    )
    headers: Dict[str, str] = Field(
        default={
            "User-Agent": "clash.meta",
            "Accept": "*/*",
        },
        description="Headers sent with every subscription request.",
    )
