"""Remote fetch capability.

``Fetcher`` is the injectable transport interface. ``DefaultFetcher``
reads http/https with requests, ftp with ftplib, and s3 with boto3, and
writes only to s3. Embedded ``user:password@`` credentials are honored
and redacted from errors and logs.
"""

from __future__ import annotations

import ftplib
from typing import Any, Protocol
from urllib.parse import unquote, urlsplit

import requests

from core.config import BridgeConfig
from core.constants import READABLE_REMOTE_SCHEMES, WRITABLE_REMOTE_SCHEMES
from core.errors import ConfigurationError, DependencyError, TransportError
from core.logging_config import get_logger
from transport.locations import redact_url, url_scheme
from transport.s3_uri import parse_s3_uri

_LOGGER = get_logger(__name__)


class Fetcher(Protocol):
    """Transport used for remote locations."""

    def fetch(self, url: str) -> bytes:
        """Return the content at ``url``."""
        ...

    def store(self, url: str, data: bytes) -> None:
        """Replace the content at ``url`` in full."""
        ...

    def supports_write(self, url: str) -> bool:
        """Return whether ``store`` works for ``url``."""
        ...


class DefaultFetcher:
    """Blocking fetcher for http, https, ftp, and s3 URLs."""

    def __init__(self, config: BridgeConfig) -> None:
        self._config = config
        self._s3_client: Any = None

    def fetch(self, url: str) -> bytes:
        """Fetch remote content.

        Raises:
            ConfigurationError: If the scheme is unsupported.
            TransportError: If the transfer fails.
        """
        scheme = url_scheme(url)
        if scheme in ("http", "https"):
            payload = self._fetch_http(url)
        elif scheme == "ftp":
            payload = self._fetch_ftp(url)
        elif scheme == "s3":
            payload = self._fetch_s3(url)
        else:
            raise ConfigurationError(
                f"Unsupported remote scheme '{scheme}' in {redact_url(url)}. "
                f"Use one of: {', '.join(READABLE_REMOTE_SCHEMES)}."
            )
        _LOGGER.info("remote_fetched", url=redact_url(url), byte_count=len(payload))
        return payload

    def store(self, url: str, data: bytes) -> None:
        """Replace remote content; only s3 supports writing.

        Raises:
            ConfigurationError: If the scheme is read-only.
            TransportError: If the upload fails.
        """
        if not self.supports_write(url):
            raise ConfigurationError(
                f"Remote location {redact_url(url)} is read-only. "
                f"Writable schemes: {', '.join(WRITABLE_REMOTE_SCHEMES)}."
            )
        location = parse_s3_uri(url)
        s3_client = self._get_s3_client()
        try:
            s3_client.put_object(Bucket=location.bucket, Key=location.key, Body=data)
        except Exception as error:
            raise TransportError(
                f"Failed to write {url}: {error}. Check AWS credentials and retry.",
                location=url,
                cause=error,
            ) from error

    def supports_write(self, url: str) -> bool:
        """Return whether the URL scheme accepts writes."""
        return url_scheme(url) in WRITABLE_REMOTE_SCHEMES

    def _fetch_http(self, url: str) -> bytes:
        parts = urlsplit(url)
        auth = None
        if parts.username is not None:
            auth = (unquote(parts.username), unquote(parts.password or ""))
        try:
            response = requests.get(
                redact_url(url),
                auth=auth,
                timeout=self._config.fetch_timeout_seconds,
            )
            response.raise_for_status()
        except requests.RequestException as error:
            raise TransportError(
                f"Failed to fetch {redact_url(url)}: {error}. Check the URL and network access.",
                location=redact_url(url),
                cause=error,
            ) from error
        return response.content

    def _fetch_ftp(self, url: str) -> bytes:
        parts = urlsplit(url)
        chunks: list[bytes] = []
        try:
            with ftplib.FTP(timeout=self._config.fetch_timeout_seconds) as client:
                client.connect(parts.hostname or "", parts.port or 21)
                client.login(
                    unquote(parts.username or "anonymous"),
                    unquote(parts.password or ""),
                )
                client.retrbinary(f"RETR {unquote(parts.path)}", chunks.append)
        except ftplib.all_errors as error:
            raise TransportError(
                f"Failed to fetch {redact_url(url)}: {error}. Check the path and credentials.",
                location=redact_url(url),
                cause=error,
            ) from error
        return b"".join(chunks)

    def _fetch_s3(self, url: str) -> bytes:
        location = parse_s3_uri(url)
        s3_client = self._get_s3_client()
        try:
            body = s3_client.get_object(Bucket=location.bucket, Key=location.key)["Body"]
            return body.read()
        except Exception as error:
            raise TransportError(
                f"Failed to fetch {url}: {error}. Check the object key and AWS credentials.",
                location=url,
                cause=error,
            ) from error

    def _get_s3_client(self) -> Any:
        if self._s3_client is None:
            self._s3_client = create_s3_client(self._config)
        return self._s3_client


def create_s3_client(config: BridgeConfig) -> Any:
    """Create a boto3 S3 client.

    Args:
        config: Runtime config containing optional profile/region.

    Returns:
        Boto3 S3 client.

    Raises:
        DependencyError: If boto3 is missing.
    """
    try:
        import boto3
    except ImportError as error:
        raise DependencyError(
            "S3 locations require boto3, but it is not installed. "
            "Install boto3 to read or write s3:// locations."
        ) from error
    session_kwargs: dict[str, str] = {}
    if config.s3_profile:
        session_kwargs["profile_name"] = config.s3_profile
    if config.s3_region:
        session_kwargs["region_name"] = config.s3_region
    session = boto3.session.Session(**session_kwargs)
    return session.client("s3")
