"""Unit tests for core config parsing."""

from __future__ import annotations

import pytest

from core.config import BridgeConfig
from core.errors import ConfigurationError


def test_from_env_reads_root_dir(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should resolve root dir from environment."""
    monkeypatch.setenv("TABLEBRIDGE_ROOT_DIR", "./.tmp-tables")

    config = BridgeConfig.from_env()

    assert config.root_dir.name == ".tmp-tables"


def test_from_env_uses_default_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    """Missing timeout variable should fall back to the default."""
    monkeypatch.delenv("TABLEBRIDGE_FETCH_TIMEOUT", raising=False)

    config = BridgeConfig.from_env()

    assert config.fetch_timeout_seconds == 30.0


def test_from_env_raises_for_invalid_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for a non-numeric fetch timeout."""
    monkeypatch.setenv("TABLEBRIDGE_FETCH_TIMEOUT", "soon")

    with pytest.raises(ConfigurationError):
        BridgeConfig.from_env()


def test_from_env_raises_for_non_positive_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for a zero fetch timeout."""
    monkeypatch.setenv("TABLEBRIDGE_FETCH_TIMEOUT", "0")

    with pytest.raises(ConfigurationError):
        BridgeConfig.from_env()


def test_with_root_dir_returns_copy(tmp_path) -> None:
    """Changing the root dir should not mutate the original config."""
    config = BridgeConfig(root_dir=tmp_path, s3_region="eu-west-1")

    updated = config.with_root_dir(tmp_path / "nested")

    assert updated.root_dir == tmp_path / "nested"
    assert updated.s3_region == "eu-west-1"
    assert config.root_dir == tmp_path
