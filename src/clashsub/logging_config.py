import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Mapping, Optional

from .constants import DEBUG_ENV, DEBUG_LOG_ENV, DEBUG_LOG_FILE_NAME


class SensitiveDataFilter(logging.Filter):
    """Filter to mask credentials in logs"""

    PATTERNS = {
        "credential": r"(?:id|uuid|password|token)\s*[=:]\s*[a-f0-9\-]{32,}",
        "email": r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}",
        # userinfo part of a share link (password@ / uuid@)
        "userinfo": r"((?:ss|vmess|vless|trojan)://)[^@\s/]+@",
    }

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()

        message = re.sub(
            self.PATTERNS["credential"], "[MASKED_CREDENTIAL]", message, flags=re.IGNORECASE
        )
        message = re.sub(self.PATTERNS["userinfo"], r"\1[MASKED]@", message)
        message = re.sub(self.PATTERNS["email"], "[MASKED_EMAIL]", message)

        record.msg = message
        record.args = None
        return True


def debug_log_path(environ: Optional[Mapping[str, str]] = None) -> Optional[Path]:
    """
    Return the debug log file requested through the environment.

    ``CLASHCTL_DEBUG_LOG`` names the file directly; ``CLASHCTL_DEBUG`` set to
    1/true/yes selects a file in the temp directory.
    """
    environ = os.environ if environ is None else environ
    explicit = environ.get(DEBUG_LOG_ENV, "").strip()
    if explicit:
        return Path(explicit)
    if environ.get(DEBUG_ENV, "").strip().lower() in ("1", "true", "yes"):
        return Path(tempfile.gettempdir()) / DEBUG_LOG_FILE_NAME
    return None


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    mask_sensitive: bool = True,
) -> None:
    """Setup logging with optional sensitive data filtering"""

    root_logger = logging.getLogger()

    # Remove existing handlers to avoid duplication
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    stream_handler.setLevel(getattr(logging, log_level.upper()))
    root_logger.addHandler(stream_handler)

    if log_file is None:
        log_file = debug_log_path()
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        root_logger.setLevel(logging.DEBUG)
    else:
        root_logger.setLevel(getattr(logging, log_level.upper()))

    if mask_sensitive:
        for handler in root_logger.handlers:
            # Avoid adding filter if it already exists
            if not any(isinstance(f, SensitiveDataFilter) for f in handler.filters):
                handler.addFilter(SensitiveDataFilter())
