"""Test configuration and helper fixtures."""

from __future__ import annotations

import asyncio
import inspect
import os
from dataclasses import dataclass
from pathlib import Path

import pytest
import yaml

from clashsub.core.locator import DiscoveryEnv


@pytest.hookimpl
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the test-suite."""

    config.addinivalue_line("markers", "asyncio: run the test inside an event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute ``async def`` tests marked with ``@pytest.mark.asyncio``."""

    test_func = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_func):
        return None

    if pyfuncitem.get_closest_marker("asyncio") is None:
        return None

    fixture_names = pyfuncitem._fixtureinfo.argnames  # type: ignore[attr-defined]
    call_kwargs = {name: pyfuncitem.funcargs[name] for name in fixture_names}
    asyncio.run(test_func(**call_kwargs))
    return True


@dataclass
class SimpleFS:
    """Lightweight fake file-system helper rooted at a temporary home."""

    root: Path

    def create_file(self, relative_path: str, contents: str = "", mtime: float | None = None) -> Path:
        file_path = self.root / relative_path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(contents, encoding="utf-8")
        if mtime is not None:
            os.utime(file_path, (mtime, mtime))
        return file_path

    def create_yaml(self, relative_path: str, document: object, mtime: float | None = None) -> Path:
        return self.create_file(
            relative_path, yaml.safe_dump(document, sort_keys=False), mtime=mtime
        )


@pytest.fixture
def fs(tmp_path: Path) -> SimpleFS:
    """Provide a fake home directory below ``tmp_path``."""

    home = tmp_path / "home"
    home.mkdir()
    return SimpleFS(home)


@pytest.fixture
def discovery_env(fs: SimpleFS) -> DiscoveryEnv:
    """A discovery snapshot that only sees the fake home directory."""

    return DiscoveryEnv(home=fs.root, system_dirs=())

