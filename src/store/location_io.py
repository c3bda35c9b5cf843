"""Read and write table locations.

Local locations resolve against the session root directory with no
sandboxing: absolute and parent-escaping paths pass through unchanged.
Local writes stage the full content in a temporary file next to the
target and then replace the target, so readers never see a partial file.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
import tempfile
from typing import Any

from core.errors import ConfigurationError, StorageError
from transport.fetch import Fetcher
from transport.locations import is_remote, redact_url

Fingerprint = tuple[int, int, int]


@dataclass(frozen=True)
class ResolvedLocation:
    """A location resolved against the root directory.

    Attributes:
        location: Original location string.
        path: Local path, or None for a remote URL.
    """

    location: str
    path: Path | None

    @property
    def remote(self) -> bool:
        """Return whether this is a remote URL."""
        return self.path is None

    @property
    def display(self) -> str:
        """Location text safe for messages and logs."""
        if self.path is None:
            return redact_url(self.location)
        return str(self.path)


def resolve_location(location: str, root_dir: Path) -> ResolvedLocation:
    """Resolve a local path against ``root_dir`` or keep a URL as-is."""
    if is_remote(location):
        return ResolvedLocation(location=location, path=None)
    return ResolvedLocation(location=location, path=root_dir / Path(location).expanduser())


def read_location(
    resolved: ResolvedLocation,
    fetcher: Fetcher,
    as_file_mapping: bool = False,
) -> Any:
    """Read raw content from a location.

    Args:
        resolved: Location to read.
        fetcher: Transport for remote URLs.
        as_file_mapping: Return ``{file name: bytes}``; local directories
            then yield every regular file inside them in name order.

    Returns:
        Raw bytes, or a file mapping when requested.

    Raises:
        StorageError: If the location is missing or unreadable.
    """
    if resolved.path is None:
        payload = fetcher.fetch(resolved.location)
        if as_file_mapping:
            return {resolved.location.rsplit("/", 1)[-1]: payload}
        return payload
    path = resolved.path
    if not path.exists():
        raise StorageError(
            f"Failed to read {path}: path does not exist. "
            "Provide an existing file or check the root directory.",
            location=str(path),
        )
    try:
        if path.is_dir():
            if not as_file_mapping:
                raise StorageError(
                    f"Failed to read {path}: expected a file, found a directory.",
                    location=str(path),
                )
            return {
                child.name: child.read_bytes()
                for child in sorted(path.iterdir())
                if child.is_file()
            }
        payload = path.read_bytes()
    except OSError as error:
        raise StorageError(
            f"Failed to read {path}: {error}. Check file permissions and retry.",
            location=str(path),
            cause=error,
        ) from error
    if as_file_mapping:
        return {path.name: payload}
    return payload


def write_location(
    resolved: ResolvedLocation,
    content: str | bytes,
    encoding: str,
    fetcher: Fetcher,
) -> None:
    """Replace the content of a location in full.

    Raises:
        ConfigurationError: If a remote location is read-only.
        StorageError: If the content cannot be encoded, or staging or replacing
            fails; prior content is kept.
    """
    try:
        payload = content.encode(encoding) if isinstance(content, str) else bytes(content)
    except (UnicodeError, LookupError) as error:
        raise StorageError(
            f"Failed to encode content for {resolved.display} as {encoding}: {error}. "
            "Set the 'encoding' option to one that covers every value.",
            location=resolved.display,
            cause=error,
        ) from error
    if resolved.path is None:
        if not fetcher.supports_write(resolved.location):
            raise ConfigurationError(
                f"Remote location {resolved.display} does not support writing."
            )
        fetcher.store(resolved.location, payload)
        return
    replace_file(resolved.path, payload)


def replace_file(path: Path, payload: bytes) -> None:
    """Stage ``payload`` next to ``path`` and atomically replace it.

    Raises:
        StorageError: If any filesystem step fails.
    """
    staged_path: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="wb",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as staged:
            staged_path = staged.name
            staged.write(payload)
            staged.flush()
            os.fsync(staged.fileno())
        os.replace(staged_path, path)
    except OSError as error:
        if staged_path is not None and os.path.exists(staged_path):
            os.unlink(staged_path)
        raise StorageError(
            f"Failed to write {path}: {error}. Prior content was left intact.",
            location=str(path),
            cause=error,
        ) from error


def local_fingerprint(resolved: ResolvedLocation) -> Fingerprint | None:
    """Return ``(inode, mtime_ns, size)`` of a local file, or None."""
    if resolved.path is None:
        return None
    try:
        stat = resolved.path.stat()
    except OSError:
        return None
    return (stat.st_ino, stat.st_mtime_ns, stat.st_size)
