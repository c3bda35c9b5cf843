"""Location classification helpers."""

from __future__ import annotations

from urllib.parse import urlsplit, urlunsplit


def is_remote(location: str) -> bool:
    """Return whether a location is a ``scheme://`` URL rather than a path."""
    scheme, separator, _ = location.partition("://")
    return bool(separator) and len(scheme) > 1 and scheme.replace("+", "").isalnum()


def url_scheme(location: str) -> str:
    """Return the lower-cased scheme of a URL."""
    return urlsplit(location).scheme.lower()


def redact_url(url: str) -> str:
    """Return ``url`` with embedded credentials removed, for messages and logs."""
    parts = urlsplit(url)
    if parts.username is None and parts.password is None:
        return url
    host = parts.hostname or ""
    if parts.port is not None:
        host = f"{host}:{parts.port}"
    return urlunsplit((parts.scheme, host, parts.path, parts.query, parts.fragment))
