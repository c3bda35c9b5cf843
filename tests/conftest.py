"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from core.config import BridgeConfig


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture
def bridge_config(tmp_path: Path) -> BridgeConfig:
    """Config whose root directory is the test's temporary directory."""
    return BridgeConfig(root_dir=tmp_path)
