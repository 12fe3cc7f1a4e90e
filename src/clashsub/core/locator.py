"""Locate the daemon configuration file and the Mihomo Party profile list.

Clash-family daemons and their GUIs keep ``config.yaml`` and ``profile.yaml``
in different places per operating system and per front-end. Discovery tries,
in order: environment overrides, a caller-supplied hint, a list of well-known
install locations, and finally a shallow scan of the usual application-data
roots. When several candidates qualify, the most recently modified one wins.

The locator never reads ``os.environ`` on its own; callers pass a
``DiscoveryEnv`` snapshot, normally built with ``DiscoveryEnv.from_environ()``.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

import yaml

from ..constants import (
    CONFIG_FILE_NAMES,
    CONFIG_MARKER_KEYS,
    CONFIG_PATH_ENV,
    MAX_SCAN_DEPTH,
    PARTY_DIR_ENV,
    PROFILE_LIST_FILE_NAME,
    SKIP_DIR_NAMES,
    TOOL_DIR_NAMES,
    TOOL_NAME_HINTS,
    WORK_DIR_NAME,
)

# Per-user application data roots on macOS, Linux and Windows
SCAN_ROOTS = (
    "Library/Application Support",
    ".config",
    "AppData/Roaming",
)

CONFIG_DIRS = (
    ".config/clash",
    ".config/mihomo",
    ".config/clash.meta",
    ".config/mihomo-party/work",
    ".config/clash-verge/mihomo-party/work",
    "Library/Application Support/clash",
    "Library/Application Support/mihomo-party/work",
    "Library/Application Support/Clash Verge/mihomo-party/work",
    "AppData/Roaming/clash",
    "AppData/Roaming/mihomo-party/work",
    "AppData/Roaming/Clash Verge/mihomo-party/work",
)

PROFILE_LIST_DIRS = (
    "Library/Application Support/mihomo-party",
    "Library/Application Support/Clash Verge/mihomo-party",
    ".config/mihomo-party",
    ".config/clash-verge/mihomo-party",
    "AppData/Roaming/mihomo-party",
    "AppData/Roaming/Clash Verge/mihomo-party",
)

DEFAULT_SYSTEM_DIRS = (Path("/etc/clash"), Path("/etc/mihomo"))


def _path_from_env(environ: Mapping[str, str], name: str) -> Optional[Path]:
    raw = environ.get(name, "").strip()
    return Path(raw).expanduser() if raw else None


@dataclass(frozen=True)
class DiscoveryEnv:
    """Snapshot of everything discovery depends on outside its arguments."""

    home: Optional[Path] = None
    config_path: Optional[Path] = None
    party_dir: Optional[Path] = None
    system_dirs: Tuple[Path, ...] = DEFAULT_SYSTEM_DIRS

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> "DiscoveryEnv":
        """Build a snapshot from the process environment (or ``environ``)."""
        environ = os.environ if environ is None else environ
        try:
            home: Optional[Path] = Path.home()
        except RuntimeError:
            home = None
        return cls(
            home=home,
            config_path=_path_from_env(environ, CONFIG_PATH_ENV),
            party_dir=_path_from_env(environ, PARTY_DIR_ENV),
        )


@dataclass(frozen=True)
class DiscoveredPath:
    """A candidate file together with its modification time."""

    path: Path
    mtime: float

    @classmethod
    def from_path(cls, path: Path) -> Optional["DiscoveredPath"]:
        try:
            return cls(path=path.absolute(), mtime=path.stat().st_mtime)
        except OSError:
            return None


def newest(candidates: Iterable[DiscoveredPath]) -> Optional[DiscoveredPath]:
    """Pick the most recently modified candidate; earlier entries win ties."""
    best: Optional[DiscoveredPath] = None
    for candidate in candidates:
        if best is None or candidate.mtime > best.mtime:
            best = candidate
    return best


def _read_yaml(path: Path) -> Tuple[bool, Any]:
    """Parse ``path`` as YAML, returning ``(parsed_ok, document)``."""
    try:
        return True, yaml.safe_load(path.read_bytes())
    except (OSError, yaml.YAMLError, UnicodeDecodeError) as exc:
        logging.debug("Ignoring unreadable YAML candidate %s: %s", path, exc)
        return False, None


def is_daemon_config(path: Path) -> bool:
    """Return True if ``path`` is a YAML mapping with a daemon marker key."""
    ok, document = _read_yaml(path)
    return ok and isinstance(document, dict) and any(key in document for key in CONFIG_MARKER_KEYS)


def is_yaml_file(path: Path) -> bool:
    """Return True if ``path`` parses as YAML."""
    return _read_yaml(path)[0]


def has_tool_name(path: Path) -> bool:
    """Return True if ``path`` mentions a Clash-family tool name (case-insensitive)."""
    lowered = str(path).lower()
    return any(hint in lowered for hint in TOOL_NAME_HINTS)


@dataclass(frozen=True)
class Target:
    """What to look for: file names, content check and where to search."""

    file_names: Tuple[str, ...]
    accepts: Callable[[Path], bool]
    well_known_dirs: Tuple[str, ...]
    check_tool_name: bool
    # Extra locations, relative to a tool directory found above a hint
    marker_subdirs: Tuple[str, ...] = ("",)
    include_system_dirs: bool = False
    overrides: Callable[[DiscoveryEnv], Sequence[Path]] = field(default=lambda env: ())


def _config_overrides(env: DiscoveryEnv) -> Sequence[Path]:
    overrides: List[Path] = []
    if env.config_path is not None:
        overrides.append(env.config_path)
    if env.party_dir is not None and env.party_dir.is_dir():
        overrides.append(env.party_dir)
    return overrides


def _profile_overrides(env: DiscoveryEnv) -> Sequence[Path]:
    return [env.party_dir] if env.party_dir is not None else []


CONFIG_TARGET = Target(
    file_names=CONFIG_FILE_NAMES,
    accepts=is_daemon_config,
    well_known_dirs=CONFIG_DIRS,
    check_tool_name=True,
    marker_subdirs=("", WORK_DIR_NAME),
    include_system_dirs=True,
    overrides=_config_overrides,
)

PROFILE_LIST_TARGET = Target(
    file_names=(PROFILE_LIST_FILE_NAME,),
    accepts=is_yaml_file,
    well_known_dirs=PROFILE_LIST_DIRS,
    check_tool_name=False,
    overrides=_profile_overrides,
)


class PathLocator:
    """
    Find the daemon config and the profile list on the local filesystem.

    Every call starts from scratch; nothing is cached between calls. Absence
    is reported as None, never as an exception.
    """

    def __init__(self, env: Optional[DiscoveryEnv] = None, max_depth: int = MAX_SCAN_DEPTH):
        self.env = env if env is not None else DiscoveryEnv.from_environ()
        self.max_depth = max_depth

    def locate_config(self, hint: Optional[Path] = None) -> Optional[Path]:
        """Locate the daemon ``config.yaml``."""
        return self._locate(CONFIG_TARGET, hint)

    def locate_profile_list(self, hint: Optional[Path] = None) -> Optional[Path]:
        """Locate the Mihomo Party ``profile.yaml``.

        ``hint`` may be the daemon config path; its directory and the
        enclosing ``mihomo-party`` directory are searched.
        """
        if hint is not None:
            hint = Path(hint).expanduser()
            if hint.is_file() and hint.name != PROFILE_LIST_FILE_NAME:
                hint = hint.parent
        return self._locate(PROFILE_LIST_TARGET, hint)

    def _locate(self, target: Target, hint: Optional[Path]) -> Optional[Path]:
        for override in target.overrides(self.env):
            found = self._resolve_pinned(target, override, check_ancestors=False)
            if found is not None:
                logging.debug("Resolved %s from environment override", found)
                return found

        if hint is not None:
            found = self._resolve_pinned(target, Path(hint).expanduser(), check_ancestors=True)
            if found is not None:
                logging.debug("Resolved %s from hint %s", found, hint)
                return found

        well_known = newest(
            candidate
            for candidate in map(DiscoveredPath.from_path, self._well_known(target, hint is None))
            if candidate is not None and target.accepts(candidate.path)
        )
        if well_known is not None:
            return well_known.path

        candidates: List[DiscoveredPath] = []
        for root in self._scan_roots():
            candidates.extend(self.scan(target, root, require_tool_name=target.check_tool_name))
        best = newest(candidates)
        if best is None:
            logging.debug("No candidate found for %s", "/".join(target.file_names))
            return None
        return best.path

    def _resolve_pinned(self, target: Target, pinned: Path, check_ancestors: bool) -> Optional[Path]:
        if pinned.is_file():
            return pinned.absolute()
        if not pinned.is_dir():
            return None

        direct = self._first_file(pinned, target.file_names)
        if direct is not None:
            return direct

        if check_ancestors:
            for ancestor in (pinned, *pinned.parents):
                if ancestor.name.lower() not in TOOL_DIR_NAMES:
                    continue
                for subdir in target.marker_subdirs:
                    found = self._first_file(ancestor / subdir, target.file_names)
                    if found is not None:
                        return found

        best = newest(self.scan(target, pinned, require_tool_name=False))
        return best.path if best is not None else None

    @staticmethod
    def _first_file(directory: Path, names: Sequence[str]) -> Optional[Path]:
        for name in names:
            candidate = directory / name
            if candidate.is_file():
                return candidate.absolute()
        return None

    def _well_known(self, target: Target, unhinted: bool) -> List[Path]:
        paths: List[Path] = []
        if self.env.home is not None:
            for rel in target.well_known_dirs:
                paths.extend(self.env.home / rel / name for name in target.file_names)
        if target.include_system_dirs and unhinted:
            for directory in self.env.system_dirs:
                paths.extend(directory / name for name in target.file_names)
        return [path for path in paths if path.is_file()]

    def _scan_roots(self) -> List[Path]:
        if self.env.home is None:
            return []
        return [self.env.home / rel for rel in SCAN_ROOTS if (self.env.home / rel).is_dir()]

    def scan(self, target: Target, root: Path, require_tool_name: bool) -> List[DiscoveredPath]:
        """
        Depth-first scan below ``root`` for files accepted by ``target``.

        Directories deeper than ``max_depth`` below ``root`` and conventional
        cache/VCS directories are not entered. Entries are visited in sorted
        order so results are deterministic.
        """
        found: List[DiscoveredPath] = []
        stack: List[Tuple[Path, int]] = [(root, 0)]
        while stack:
            directory, depth = stack.pop()
            try:
                entries = sorted(directory.iterdir())
            except OSError:
                continue
            subdirs: List[Path] = []
            for entry in entries:
                if entry.is_dir():
                    if depth < self.max_depth and entry.name.lower() not in SKIP_DIR_NAMES:
                        subdirs.append(entry)
                    continue
                if entry.name not in target.file_names:
                    continue
                if require_tool_name and not has_tool_name(entry.relative_to(root)):
                    continue
                if not target.accepts(entry):
                    continue
                candidate = DiscoveredPath.from_path(entry)
                if candidate is not None:
                    found.append(candidate)
            stack.extend((subdir, depth + 1) for subdir in reversed(subdirs))
        return found


def find_config(hint: Optional[Path] = None, env: Optional[DiscoveryEnv] = None) -> Optional[Path]:
    """Locate the daemon config with a fresh ``PathLocator``."""
    return PathLocator(env).locate_config(hint)


def find_profile_list(hint: Optional[Path] = None, env: Optional[DiscoveryEnv] = None) -> Optional[Path]:
    """Locate the Mihomo Party profile list with a fresh ``PathLocator``."""
    return PathLocator(env).locate_profile_list(hint)
