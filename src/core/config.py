"""Runtime configuration model for tablebridge.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import os
from pathlib import Path

from core.constants import DEFAULT_FETCH_TIMEOUT_SECONDS, DEFAULT_ROOT_DIR
from core.errors import ConfigurationError


@dataclass(frozen=True)
class BridgeConfig:
    """Validated runtime configuration.

    Attributes:
        root_dir: Directory that relative local locations resolve against.
        fetch_timeout_seconds: Timeout applied to remote fetches.
        s3_region: Optional default AWS region for S3 locations.
        s3_profile: Optional AWS profile for boto3 session initialization.
    """

    root_dir: Path
    fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS
    s3_region: str | None = None
    s3_profile: str | None = None

    @classmethod
    def from_env(cls) -> "BridgeConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            ConfigurationError: If environment values are invalid.
        """
        root_dir_value = os.getenv("TABLEBRIDGE_ROOT_DIR", str(DEFAULT_ROOT_DIR))
        timeout_value = os.getenv(
            "TABLEBRIDGE_FETCH_TIMEOUT", str(DEFAULT_FETCH_TIMEOUT_SECONDS)
        )
        return cls(
            root_dir=Path(root_dir_value).expanduser(),
            fetch_timeout_seconds=_parse_fetch_timeout(timeout_value),
            s3_region=os.getenv("TABLEBRIDGE_S3_REGION"),
            s3_profile=os.getenv("TABLEBRIDGE_S3_PROFILE"),
        )

    def with_root_dir(self, root_dir: str | Path) -> "BridgeConfig":
        """Return a copy whose local locations resolve under ``root_dir``."""
        return replace(self, root_dir=Path(root_dir).expanduser())


def _parse_fetch_timeout(raw_value: str) -> float:
    """Parse the fetch timeout environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed positive timeout in seconds.

    Raises:
        ConfigurationError: If value is not a positive number.
    """
    try:
        timeout = float(raw_value)
    except ValueError as error:
        raise ConfigurationError(
            "Invalid TABLEBRIDGE_FETCH_TIMEOUT value: "
            f"expected number of seconds, got '{raw_value}'. "
            "Set TABLEBRIDGE_FETCH_TIMEOUT to a positive number."
        ) from error
    if timeout <= 0:
        raise ConfigurationError(
            f"Invalid TABLEBRIDGE_FETCH_TIMEOUT value: {raw_value} must be positive."
        )
    return timeout
