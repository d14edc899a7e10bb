"""Backup artifact encodings: canonical JSON (optionally gzipped) and SQL dumps."""

from __future__ import annotations

from .reader import GZIP_MAGIC, extract_backup, read_backup_file
from .resolutions import InvalidResolutionsError, parse_resolutions, read_resolutions_file
from .writer import encode_snapshot, to_artifact, write_snapshot

__all__ = [
    "GZIP_MAGIC",
    "InvalidResolutionsError",
    "encode_snapshot",
    "extract_backup",
    "parse_resolutions",
    "read_backup_file",
    "read_resolutions_file",
    "to_artifact",
    "write_snapshot",
]
