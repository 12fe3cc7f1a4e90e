from pathlib import Path

# Settings file loaded when no --config is given
SETTINGS_FILE = Path.home() / ".config" / "clashsub" / "settings.yaml"

# Environment overrides honoured by the path locator
CONFIG_PATH_ENV = "CLASH_CONFIG_PATH"
PARTY_DIR_ENV = "CLASH_PARTY_DIR"

# Debug logging switches kept from clashctl
DEBUG_LOG_ENV = "CLASHCTL_DEBUG_LOG"
DEBUG_ENV = "CLASHCTL_DEBUG"
DEBUG_LOG_FILE_NAME = "clashctl-debug.log"

CONFIG_FILE_NAMES = ("config.yaml", "config.yml")
PROFILE_LIST_FILE_NAME = "profile.yaml"
PROFILES_DIR_NAME = "profiles"
WORK_DIR_NAME = "work"

# Top-level keys that identify a complete daemon configuration
FULL_CONFIG_KEYS = (
    "proxies",
    "proxy-providers",
    "proxy-groups",
    "rules",
    "rule-providers",
)

# Top-level keys accepted as evidence that a YAML file is a daemon config
CONFIG_MARKER_KEYS = (
    "proxies",
    "proxy-providers",
    "proxy-groups",
    "external-controller",
    "mixed-port",
    "socks-port",
    "port",
)

# Pseudo-targets that proxy groups may reference besides real proxies
SPECIAL_TARGETS = ("DIRECT", "REJECT", "REJECT-DROP", "PASS", "GLOBAL")

# Path fragments (lowercase) that a scanned config path must contain
TOOL_NAME_HINTS = ("clash", "mihomo", "verge")

# Directory names that mark a tool's data directory when walking up from a hint
TOOL_DIR_NAMES = (
    "clash",
    "mihomo",
    "mihomo-party",
    "clash.meta",
    "clash-verge",
    "clash verge",
)

# Directories never descended into while scanning
SKIP_DIR_NAMES = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        "node_modules",
        "__pycache__",
        ".venv",
        "cache",
        "caches",
        "tmp",
        "temp",
    }
)

MAX_SCAN_DEPTH = 3
