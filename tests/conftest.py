"""Shared fixtures for sizescope tests."""

from pathlib import Path

import pytest

from sizescope.config import AppConfig
from sizescope.scanner import FolderScanner


def write_bytes(path: Path, size: int) -> Path:
    """Create a file of exactly `size` bytes, creating parents as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    return path


@pytest.fixture
def app_config():
    return AppConfig(cache_max_entries=100, cache_ttl_millis=60_000)


@pytest.fixture
def scanner(app_config):
    with FolderScanner(app_config, max_workers=4) as s:
        yield s


@pytest.fixture
def sized_tree(tmp_path):
    """
    root/
      A/         a.bin (50)
        B/       b.bin (150)
      C/         c.bin (100)
    """
    root = tmp_path / "root"
    write_bytes(root / "A" / "a.bin", 50)
    write_bytes(root / "A" / "B" / "b.bin", 150)
    write_bytes(root / "C" / "c.bin", 100)
    return root
