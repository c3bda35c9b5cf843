"""Core constants used across tablebridge modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_ROOT_DIR = Path(".")
DEFAULT_FETCH_TIMEOUT_SECONDS = 30.0
DEFAULT_ENCODING = "utf-8"
DEFAULT_RECORD_SEPARATOR = "\n"
DEFAULT_QUOTE_CHAR = '"'
DEFAULT_KEY_VALUE_SEPARATOR = "="
DEFAULT_TABLE_PREFIX = "table"
DEFAULT_COLUMN_PREFIX = "col"
FIRST_LINE_SENTINEL = "first_line"
MAX_IDENTIFIER_LENGTH = 128
LEAF_VALUE_JOINER = " "
FOLD_OCCURRENCE_MARKER = "^"
FOLD_CHILD_SEPARATOR = "/"
CATALOG_FILE_VERSION = 1
ID3V1_TRAILER_SIZE = 128
ID3V1_MARKER = b"TAG"
KEY_VALUE_COLUMNS = ("key", "value")
PASSWD_COLUMNS = ("username", "password", "uid", "gid", "gecos", "home", "shell")
MP3_COLUMNS = ("file_name", "song", "artist", "album", "year", "comment", "genre")
WEBLOG_COLUMNS = (
    "remote_host",
    "username",
    "auth_time",
    "request",
    "status",
    "bytes",
    "referer",
    "client",
)
WRITABLE_REMOTE_SCHEMES = ("s3",)
READABLE_REMOTE_SCHEMES = ("http", "https", "ftp", "s3")
